import pytest

from format_tools.errors import InvalidPresetError
from format_tools.presets import (
    BUILTIN_PRESETS,
    TemplateConfig,
    build_engine_metadata,
    get_preset,
    merge_configs,
    resolve_preset_layer,
    validate_config,
)


def test_builtin_preset_ids() -> None:
    assert [preset.id for preset in BUILTIN_PRESETS] == [
        "empty",
        "zh-paper",
        "en-paper",
        "business",
        "technical",
    ]


def test_unknown_preset() -> None:
    with pytest.raises(InvalidPresetError):
        get_preset("does-not-exist")


def test_merge_precedence_user_over_preset_over_default() -> None:
    config = merge_configs(
        {"title": "Mine", "sectionNumbering": "multilevel", "date": ""},
        get_preset("en-paper").config,
    )
    assert config.title == "Mine"
    assert config.section_numbering == "multilevel"
    assert config.language_style == "en-academic"
    assert config.cross_reference == "basic"
    assert config.date == ""


def test_template_config_from_mapping_normalizes_keys() -> None:
    config = TemplateConfig.from_mapping({"sectionNumbering": "multilevel", "bogus": 1, "title": ""})
    assert config.section_numbering == "multilevel"
    assert config.title == TemplateConfig().title


def test_resolve_preset_layer_variants() -> None:
    assert resolve_preset_layer("business")["cross_reference"] == "full-link"
    assert resolve_preset_layer({"languageStyle": "en-academic", "unknown": 1}) == {
        "language_style": "en-academic"
    }
    assert resolve_preset_layer({"config": {"crossReference": "smart"}}) == {
        "cross_reference": "smart"
    }
    assert resolve_preset_layer(None) == {}


def test_english_metadata() -> None:
    metadata = build_engine_metadata(
        TemplateConfig(
            title="Paper",
            author=["Ann", "Bob"],
            date="2024-03-01",
            language_style="en-academic",
            section_numbering="basic",
            cross_reference="smart",
            equation_numbering="auto",
        )
    )
    assert metadata["title-meta"] == "Paper"
    assert metadata["author-meta"] == "Ann, Bob"
    assert metadata["figPrefix"] == ["fig.", "figs."]
    assert metadata["numberSections"] is True
    assert metadata["chaptersDepth"] == 1
    assert metadata["cref"] is True
    assert metadata["autoEqnLabels"] is True
    assert metadata["lastDelim"] == " and "


def test_default_metadata_is_chinese_unnumbered() -> None:
    metadata = build_engine_metadata(TemplateConfig())
    assert "title" not in metadata
    assert metadata["figureTitle"] == "图"
    assert metadata["numberSections"] is False
    assert metadata["linkReferences"] is False
    assert metadata["lastDelim"] == " 和 "


def test_business_style_links_references() -> None:
    metadata = build_engine_metadata(merge_configs(None, get_preset("business").config))
    assert metadata["secPrefix"] == "章节"
    assert metadata["titleDelim"] == " -"
    assert metadata["nameInLink"] is True


def test_validation_errors() -> None:
    config = TemplateConfig(date="01/02/2024", cross_reference="fancy")  # type: ignore[arg-type]
    errors = validate_config(config)
    assert "Date must use the YYYY-MM-DD format" in errors
    assert "Invalid cross reference: fancy" in errors
    with pytest.raises(InvalidPresetError) as exc:
        build_engine_metadata(config)
    assert exc.value.errors == errors
