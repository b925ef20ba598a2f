import pytest

from helpers import source
from jsontranslate.classes import LeafEntry, SourceFile
from jsontranslate.errors import MalformedDocument
from jsontranslate.parser import (
    build_indexes,
    build_language_index,
    discover_languages,
    discover_sources,
    expand_keys,
    extract_variables,
    flatten_document,
    load_document,
)


def test_flatten_nested_object():
    document = {"a": {"b": {"c": "hi {x}"}}}
    pairs = flatten_document(document, "en/a.json")
    assert pairs == [("a.b.c", LeafEntry("hi {x}", "en/a.json"))]
    assert extract_variables(pairs[0][1].value) == {"x"}


def test_flatten_round_trip():
    document = {
        "common": {"greeting": "Hello", "bye": "Bye {name}"},
        "messages": {"welcome": {"title": "Welcome"}},
        "top": "level",
    }
    flat = {key: entry.value for key, entry in flatten_document(document, "x.json")}
    assert expand_keys(flat) == document


def test_flatten_keeps_document_order():
    document = {"b": "1", "a": {"z": "2", "y": "3"}, "c": "4"}
    keys = [key for key, _ in flatten_document(document, "x.json")]
    assert keys == ["b", "a.z", "a.y", "c"]


def test_array_is_a_single_leaf():
    pairs = flatten_document({"list": ["x", "y"]}, "en/a.json")
    assert [key for key, _ in pairs] == ["list"]
    assert pairs[0][1].value == '["x", "y"]'


def test_scalar_leaves_use_json_text():
    document = {"n": 1, "f": 1.5, "b": True, "z": None, "s": ""}
    values = {key: entry.value for key, entry in flatten_document(document, "x.json")}
    assert values == {"n": "1", "f": "1.5", "b": "true", "z": "null", "s": ""}


def test_empty_object_produces_no_key():
    pairs = flatten_document({"empty": {}, "kept": "yes"}, "x.json")
    assert [key for key, _ in pairs] == ["kept"]


@pytest.mark.parametrize("document", [["a"], "text", 3, None])
def test_non_object_root_is_malformed(document):
    with pytest.raises(MalformedDocument) as exc:
        flatten_document(document, "en/bad.json")
    assert exc.value.path == "en/bad.json"


def test_load_document_rejects_invalid_json():
    with pytest.raises(MalformedDocument):
        load_document(SourceFile("en", "en/bad.json", "{not json"))


def test_load_document_rejects_unreadable_file():
    with pytest.raises(MalformedDocument) as exc:
        load_document(SourceFile("en", "en/bad.json", None, "permission denied"))
    assert exc.value.reason == "permission denied"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Hello {name}", {"name"}),
        ("{a} and {b} and {a}", {"a", "b"}),
        ("{ padded }", {"padded"}),
        ("{Name} {name}", {"Name", "name"}),
        ("no placeholders", set()),
        ("", set()),
        ("{}", set()),
        ("{   }", set()),
        ("unbalanced {name", set()),
        ("unbalanced name}", set()),
        ("{user.name} {0}", {"user.name", "0"}),
    ],
)
def test_extract_variables(text, expected):
    assert extract_variables(text) == expected


def test_build_language_index_merges_files():
    sources = [
        source("en", "b.json", {"b": {"key": "B"}}),
        source("en", "a.json", {"a": {"key": "A"}}),
    ]
    index = build_language_index("en", sources)
    assert index.language == "en"
    assert index.entries == {
        "a.key": LeafEntry("A", "en/a.json"),
        "b.key": LeafEntry("B", "en/b.json"),
    }
    assert index.notes == []


def test_build_language_index_later_file_wins_on_duplicate():
    sources = [
        source("en", "b.json", {"shared": "from b"}),
        source("en", "a.json", {"shared": "from a"}),
    ]
    index = build_language_index("en", sources, workers=2)
    assert index.entries["shared"] == LeafEntry("from b", "en/b.json")
    assert len(index.notes) == 1
    note = index.notes[0]
    assert (note.key, note.previous_file, note.file) == ("shared", "en/a.json", "en/b.json")


def test_build_indexes_isolates_malformed_language():
    sources = [
        source("de", "a.json", "{broken"),
        source("de", "b.json", {"k": "v"}),
        source("en", "a.json", {"k": "v"}),
    ]
    indexes, unavailable = build_indexes(sources)
    assert sorted(indexes) == ["en"]
    assert [x.language for x in unavailable] == ["de"]
    assert "de/a.json" in unavailable[0].cause


def test_discover_sources(translation_folder):
    root = translation_folder(
        {
            "fr/b.json": {"k": "v"},
            "fr/a.json": {"k": "v"},
            "en/a.json": {"k": "v"},
            "en/notes.txt": "ignored",
        }
    )
    (root / "README.md").write_text("not a language", "utf-8")
    sources = discover_sources(str(root))
    assert [(x.language, x.path) for x in sources] == [
        ("en", "en/a.json"),
        ("fr", "fr/a.json"),
        ("fr", "fr/b.json"),
    ]
    assert all(x.error is None for x in sources)


def test_discover_sources_records_decode_error(translation_folder):
    root = translation_folder({"en/a.json": {"k": "v"}})
    (root / "en" / "b.json").write_bytes(b"\xff\xfe\x00bad")
    sources = discover_sources(str(root))
    broken = [x for x in sources if x.path == "en/b.json"][0]
    assert broken.contents is None
    assert broken.error


def test_load_document_rejects_deep_nesting():
    contents = '{"a":' * 100000 + '"x"' + "}" * 100000
    with pytest.raises(MalformedDocument) as exc:
        load_document(SourceFile("de", "de/deep.json", contents))
    assert exc.value.path == "de/deep.json"


def test_empty_string_key_is_a_path_segment():
    pairs = flatten_document({"": {"a": "x"}, "a": "y"}, "en/a.json")
    assert [key for key, _ in pairs] == [".a", "a"]
    index = build_language_index("en", [source("en", "a.json", {"": {"a": "x"}, "a": "y"})])
    assert index.notes == []


def test_build_indexes_keeps_language_without_files():
    indexes, unavailable = build_indexes(
        [source("en", "a.json", {"k": "v"})], languages=["en", "nl"]
    )
    assert sorted(indexes) == ["en", "nl"]
    assert indexes["nl"].entries == {}
    assert unavailable == []


def test_discover_languages_includes_empty_folder(translation_folder):
    root = translation_folder({"en/a.json": {"k": "v"}})
    (root / "nl").mkdir()
    assert discover_languages(str(root)) == ["en", "nl"]
    assert [x.language for x in discover_sources(str(root))] == ["en"]
