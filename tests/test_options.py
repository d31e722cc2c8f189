# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Unit tests for options.py."""

import base64
import json
from pathlib import Path

import pytest

from pdfretext.exceptions import OptionsError
from pdfretext.options import EditOption, decode_options, load_options, parse_options

CAMEL_OPTION = {
    "pageNumber": 1,
    "font": "Arial.ttf",
    "fontIdx": 2,
    "textReplacements": {"Hello": "World", "a": "b"},
    "removeObjects": ["/Watermark", 12],
    "plugins": ["xbmu"],
}


def _b64(data) -> str:
    return base64.b64encode(json.dumps(data).encode("utf-8")).decode("ascii")


class TestEditOptionFromDict:
    """Tests for EditOption.from_dict."""

    def test_camel_case_keys(self):
        option = EditOption.from_dict(CAMEL_OPTION)
        assert option.page_number == 1
        assert option.font == "Arial.ttf"
        assert option.font_index == 2
        assert option.code_unit_width == 2
        assert list(option.text_replacements.items()) == [
            ("Hello", "World"),
            ("a", "b"),
        ]
        assert option.remove_objects == ["/Watermark", 12]
        assert option.plugins == ["xbmu"]

    def test_snake_case_keys(self):
        option = EditOption.from_dict(
            {"page_number": 0, "font_index": 1, "code_unit_width": 1}
        )
        assert option.font_index == 1
        assert option.code_unit_width == 1

    def test_defaults(self):
        option = EditOption.from_dict({"pageNumber": 0})
        assert option.font == ""
        assert option.text_replacements == {}
        assert option.remove_objects == []
        assert option.plugins == []

    def test_missing_page_number(self):
        with pytest.raises(OptionsError, match="pageNumber"):
            EditOption.from_dict({"font": "x.ttf"})

    @pytest.mark.parametrize(
        "data",
        [
            {"pageNumber": "1"},
            {"pageNumber": True},
            {"pageNumber": 0, "fontIdx": 1.5},
            {"pageNumber": 0, "codeUnitWidth": 0},
            {"pageNumber": 0, "font": 3},
            {"pageNumber": 0, "textReplacements": {"a": 1}},
            {"pageNumber": 0, "textReplacements": ["a"]},
            {"pageNumber": 0, "removeObjects": [False]},
            {"pageNumber": 0, "removeObjects": "/Im0"},
            {"pageNumber": 0, "plugins": [1]},
        ],
    )
    def test_invalid_values(self, data):
        with pytest.raises(OptionsError):
            EditOption.from_dict(data)

    def test_not_an_object(self):
        with pytest.raises(OptionsError):
            EditOption.from_dict(["pageNumber"])


class TestParseOptions:
    """Tests for parse_options, load_options and decode_options."""

    def test_list(self):
        options = parse_options([{"pageNumber": 0}, {"pageNumber": 1}])
        assert [o.page_number for o in options] == [0, 1]

    def test_single_object(self):
        assert len(parse_options({"pageNumber": 0})) == 1

    def test_not_a_list(self):
        with pytest.raises(OptionsError):
            parse_options("pageNumber")

    def test_load_from_file(self, tmp_dir: Path):
        path = tmp_dir / "options.json"
        path.write_text(json.dumps([CAMEL_OPTION]), encoding="utf-8")
        assert load_options(path)[0].font == "Arial.ttf"

    def test_load_invalid_json(self, tmp_dir: Path):
        path = tmp_dir / "options.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(OptionsError):
            load_options(path)

    def test_load_missing_file(self, tmp_dir: Path):
        with pytest.raises(OptionsError):
            load_options(tmp_dir / "missing.json")

    def test_decode_base64(self):
        options = decode_options(_b64([CAMEL_OPTION]))
        assert options[0].plugins == ["xbmu"]

    @pytest.mark.parametrize("prefix", ["?options=", "options="])
    def test_decode_query_prefix(self, prefix):
        options = decode_options(prefix + _b64([{"pageNumber": 3}]))
        assert options[0].page_number == 3

    def test_decode_invalid_base64(self):
        with pytest.raises(OptionsError):
            decode_options("not base64!")

    def test_decode_invalid_json(self):
        encoded = base64.b64encode(b"{nope").decode("ascii")
        with pytest.raises(OptionsError):
            decode_options(encoded)
