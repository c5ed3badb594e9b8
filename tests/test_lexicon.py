"""Unit tests for word list loading and filtering."""

from unittest.mock import Mock

import pytest
import requests

from lexicon import LexiconBootstrapError, is_eligible, load_lexicon, normalize
from tests.conftest import make_response


class TestEligibility:
    @pytest.mark.parametrize("word", ["cat", "Cats", "abcdefghij", "a b"])
    def test_eligible(self, word):
        assert is_eligible(word) is True

    @pytest.mark.parametrize("word", ["", "ab", "abcdefghijk", "   ", "caterpillar"])
    def test_not_eligible(self, word):
        assert is_eligible(word) is False

    def test_normalize_strips_carriage_returns(self):
        text = "cat\r\nab\r\ndogs\r\n\r\ncaterpillar\nbird"
        assert normalize(text) == ["cat", "dogs", "bird"]


class TestLoadLexicon:
    def test_reads_local_file_without_network(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_text("cat\nab\ndog\r\n", encoding="utf-8")
        session = Mock()

        words = load_lexicon(str(path), session=session)

        assert words == ("cat", "dog")
        session.get.assert_not_called()

    def test_bootstrap_downloads_and_writes_back(self, tmp_path):
        path = tmp_path / "data" / "words.txt"
        session = Mock()
        session.get.return_value = make_response(200, text="cat\r\nx\r\ndogs\r\nhippopotamus\r\n")

        words = load_lexicon(str(path), "https://example.test/words.txt", session=session)

        assert words == ("cat", "dogs")
        assert path.read_text(encoding="utf-8") == "cat\ndogs"
        session.get.assert_called_once()

        # Second run reads the cached file
        session.get.reset_mock()
        assert load_lexicon(str(path), session=session) == ("cat", "dogs")
        session.get.assert_not_called()

    def test_bootstrap_failure_is_fatal(self, tmp_path):
        session = Mock()
        session.get.side_effect = requests.ConnectionError("offline")

        with pytest.raises(LexiconBootstrapError):
            load_lexicon(str(tmp_path / "words.txt"), session=session)
        assert not (tmp_path / "words.txt").exists()

    def test_bootstrap_http_error_is_fatal(self, tmp_path):
        session = Mock()
        session.get.return_value = make_response(503)

        with pytest.raises(LexiconBootstrapError):
            load_lexicon(str(tmp_path / "words.txt"), session=session)

    def test_undecodable_file_is_replaced_from_download(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_bytes(b"cat\n\xff\xfe\xfadog\n")
        session = Mock()
        session.get.return_value = make_response(200, text="bird\r\nfish\r\n")

        words = load_lexicon(str(path), "https://example.test/words.txt", session=session)

        assert words == ("bird", "fish")
        session.get.assert_called_once()
        assert path.read_text(encoding="utf-8") == "bird\nfish"
