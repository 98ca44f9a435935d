import pytest

from license_tagger.exceptions import PatchError
from license_tagger.models import TagPatch
from license_tagger.patch import load_patch, parse_patch


def test_parse_patch_is_case_insensitive():
    patch = parse_patch('{"Creator": "Jane Doe", "rights": "CC-BY-SA-4.0", "COPYRIGHT": "2023"}')

    assert patch == TagPatch(creator="Jane Doe", rights="CC-BY-SA-4.0", copyright="2023")
    assert patch.to_dict() == {"creator": "Jane Doe", "rights": "CC-BY-SA-4.0", "copyright": "2023"}


def test_absent_and_empty_values_differ():
    patch = parse_patch('{"Author": ""}')

    assert patch.author == ""
    assert patch.creator is None
    assert list(patch.items()) == [("author", "")]
    assert not patch.is_empty()
    assert parse_patch("{}").is_empty()


@pytest.mark.parametrize(
    "text",
    [
        '{"Creator": "Jane"',             # malformed
        '["Creator", "Jane"]',            # not an object
        '{"Title": "Sunset"}',            # unsupported tag
        '{"Creator": 42}',                # not a string
        '{"Creator": "A", "creator": "B"}',
    ],
)
def test_parse_patch_rejects_bad_input(text):
    with pytest.raises(PatchError):
        parse_patch(text)


def test_load_patch_from_file(tmp_path):
    f = tmp_path / "tags.json"
    f.write_text('{"License": "CC-BY-4.0"}', encoding="utf-8")

    assert load_patch(f) == TagPatch(license="CC-BY-4.0")

    with pytest.raises(PatchError):
        load_patch(tmp_path / "missing.json")
