from coco_completion.llm.types import PromptConfig
from coco_completion.prompts import build_prompt, list_config_templates, render_template


def _config(is_fill_mode=True):
    return PromptConfig(
        is_fill_mode=is_fill_mode,
        autoregressive_template="AR:[PREFIX]",
        fill_mode_template="<pre>[PREFIX]<suf>[SUFFIX]<mid>",
        stop_tokens=("<|endoftext|>",),
        tokens_to_clear=("<mid>",),
        temperature=0.2,
        max_new_tokens=60,
        model_id_or_endpoint="bigcode/starcoder",
    )


def test_fill_mode_used_when_enabled_and_suffix_present():
    prompt, fim = build_prompt("def f():\n    ", "\nprint(f())", _config())
    assert prompt == "<pre>def f():\n    <suf>\nprint(f())<mid>"
    assert fim is True


def test_whitespace_suffix_falls_back_to_autoregressive():
    prompt, fim = build_prompt("x = ", "  \n ", _config())
    assert prompt == "AR:x = "
    assert fim is False


def test_fim_flag_reports_suffix_even_when_fill_mode_disabled():
    prompt, fim = build_prompt("x = ", "y", _config(is_fill_mode=False))
    assert prompt == "AR:x = "
    assert fim is True


def test_render_replaces_first_occurrence_only():
    rendered = render_template("[PREFIX]|[SUFFIX]|[PREFIX]|[SUFFIX]", "a", "b")
    assert rendered == "a|b|[PREFIX]|[SUFFIX]"


def test_render_keeps_placeholders_inside_context_text():
    rendered = render_template("<pre>[PREFIX]<suf>[SUFFIX]<mid>", "s = '[SUFFIX]'", "tail")
    assert rendered == "<pre>s = '[SUFFIX]'<suf>tail<mid>"


def test_render_preserves_template_text_verbatim():
    template = "  leading {braces} %s [PREFIX] trailing\n"
    assert render_template(template, "P", "S") == "  leading {braces} %s P trailing\n"


def test_builtin_templates_listed():
    names = list_config_templates()
    assert "bigcode/starcoder" in names
    assert "Custom" in names
