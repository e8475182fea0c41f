import pytest

from oracle_pipeline.config import FrozenConfig
from oracle_pipeline.core import schema
from oracle_pipeline.core.exceptions import TemplateBindingError
from oracle_pipeline.core.schema import SchemaContract
from oracle_pipeline.core.types import InlineImage
from oracle_pipeline.prompts import JSON_INSTRUCTION, PromptBuilder, PromptTemplate

pytestmark = pytest.mark.unit

CONFIG = FrozenConfig(
    model="text-model", vision_model="vision-model", temperature=0.5, max_output_tokens=512
)

TEMPLATE = PromptTemplate(
    name="horoscope",
    system="You are an astrologer reading for {sign}.",
    user="Write a reading for {sign} on {today}.",
)

CONTRACT = SchemaContract("horoscope", (schema.string("sign"),))


def test_placeholders_are_distinct_in_order_of_appearance():
    assert TEMPLATE.placeholders() == ("sign", "today")


def test_build_binds_fields_and_uses_config_defaults():
    prompt = PromptBuilder(CONFIG).build(TEMPLATE, {"sign": "Leo", "today": "Mon Oct 19"})

    assert prompt.system_message == "You are an astrologer reading for Leo."
    assert prompt.user_message == "Write a reading for Leo on Mon Oct 19."
    assert prompt.options.model == "text-model"
    assert prompt.options.temperature == 0.5
    assert prompt.options.max_output_tokens == 512
    assert prompt.options.image is None


def test_template_overrides_take_precedence_over_config():
    template = PromptTemplate(
        name="t", system="s", user="u", temperature=0.9, model="custom", max_output_tokens=64
    )

    options = PromptBuilder(CONFIG).build(template, {}).options

    assert (options.model, options.temperature, options.max_output_tokens) == (
        "custom",
        0.9,
        64,
    )


def test_missing_fields_raise_binding_error_listing_them():
    with pytest.raises(TemplateBindingError) as excinfo:
        PromptBuilder(CONFIG).build(TEMPLATE, {})

    assert excinfo.value.missing == ("sign", "today")
    assert excinfo.value.template_name == "horoscope"


def test_extra_fields_are_ignored():
    prompt = PromptBuilder(CONFIG).build(
        TEMPLATE, {"sign": "Leo", "today": "Mon", "unused": 1}
    )

    assert "Leo" in prompt.user_message


@pytest.mark.parametrize("user", ["Reading for {}", "Reading for {0}"])
def test_positional_placeholders_are_rejected(user):
    template = PromptTemplate(name="positional", system="s", user=user)

    with pytest.raises(TemplateBindingError, match="positional"):
        PromptBuilder(CONFIG).build(template, {})


def test_malformed_template_is_a_binding_error():
    template = PromptTemplate(name="broken", system="s", user="Reading for {sign")

    with pytest.raises(TemplateBindingError, match="malformed"):
        PromptBuilder(CONFIG).build(template, {"sign": "Leo"})


def test_doubled_braces_render_literally():
    template = PromptTemplate(name="literal", system="s", user='Return {{"sign": "{sign}"}}')

    prompt = PromptBuilder(CONFIG).build(template, {"sign": "Leo"})

    assert prompt.user_message == 'Return {"sign": "Leo"}'


def test_contract_shape_is_appended_to_user_message():
    prompt = PromptBuilder(CONFIG).build(
        TEMPLATE, {"sign": "Leo", "today": "Mon"}, contract=CONTRACT
    )

    assert JSON_INSTRUCTION in prompt.user_message
    assert prompt.user_message.endswith(CONTRACT.describe())


def test_schema_can_be_excluded_per_template():
    template = PromptTemplate(name="plain", system="s", user="u", include_schema=False)

    prompt = PromptBuilder(CONFIG).build(template, {}, contract=CONTRACT)

    assert prompt.user_message == "u"


def test_vision_template_requires_an_image():
    template = PromptTemplate(name="palm", system="s", user="Read this palm", vision=True)

    with pytest.raises(TemplateBindingError) as excinfo:
        PromptBuilder(CONFIG).build(template, {})

    assert excinfo.value.missing == ("image",)


def test_vision_template_uses_vision_model_and_carries_the_image():
    template = PromptTemplate(name="palm", system="s", user="Read this palm", vision=True)
    image = InlineImage(b"\x89PNG", "image/png")

    options = PromptBuilder(CONFIG).build(template, {}, image=image).options

    assert options.model == "vision-model"
    assert options.image == image


def test_images_are_dropped_for_text_templates():
    image = InlineImage(b"\x89PNG", "image/png")

    options = PromptBuilder(CONFIG).build(
        TEMPLATE, {"sign": "Leo", "today": "Mon"}, image=image
    ).options

    assert options.image is None
