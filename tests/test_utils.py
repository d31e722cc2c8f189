# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Unit tests for utils.py."""

import logging

from conftest import make_cid_pdf, make_pdf_with_page
from pikepdf import Array, Dictionary, Name

from pdfretext.utils import (
    LOG_FORMAT,
    check_visited,
    is_pdf_encrypted,
    obj_key,
    safe_str,
    setup_logging,
)
from pdfretext.utils import (
    resolve_indirect as _resolve_indirect,
)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_default_level_is_info(self) -> None:
        """Default log level is INFO."""
        logger = setup_logging()
        assert logger.level == logging.INFO

    def test_verbose_sets_debug(self) -> None:
        logger = setup_logging(verbose=True)
        assert logger.level == logging.DEBUG

    def test_quiet_takes_precedence(self) -> None:
        logger = setup_logging(verbose=True, quiet=True)
        assert logger.level == logging.ERROR

    def test_single_handler(self) -> None:
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1
        assert logger.handlers[0].formatter._fmt == LOG_FORMAT

    def test_logger_name(self) -> None:
        assert setup_logging().name == "pdfretext"


class TestIsPdfEncrypted:
    """Tests for is_pdf_encrypted."""

    def test_plain_pdf(self) -> None:
        assert is_pdf_encrypted(make_pdf_with_page()) is False


class TestObjectIdentity:
    """Tests for obj_key, check_visited and resolve_indirect."""

    def test_indirect_key(self) -> None:
        pdf = make_cid_pdf()
        font = pdf.pages[0].obj.Resources.Font.F1
        assert obj_key(font) == font.objgen

    def test_direct_key(self) -> None:
        assert obj_key(Dictionary(A=1)) is None

    def test_check_visited(self) -> None:
        pdf = make_cid_pdf()
        font = pdf.pages[0].obj.Resources.Font.F1
        visited: set[tuple[int, int]] = set()
        assert check_visited(font, visited) is False
        assert check_visited(font, visited) is True

    def test_direct_objects_never_visited(self) -> None:
        visited: set[tuple[int, int]] = set()
        direct = Array([1])
        assert check_visited(direct, visited) is False
        assert check_visited(direct, visited) is False

    def test_resolve_plain_value(self) -> None:
        assert _resolve_indirect(5) == 5


class TestSafeStr:
    """Tests for safe_str."""

    def test_name(self) -> None:
        assert safe_str(Name.Font) == "/Font"

    def test_plain(self) -> None:
        assert safe_str(12) == "12"
