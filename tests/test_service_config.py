import tempfile
import unittest
from pathlib import Path

from opai_cli.core import ConfigUnreadable, CredentialNotFound
from opai_cli.core.service_config import (
    DEFAULT_CHAT_URL,
    candidate_files,
    find_service_config,
    load_service_config,
    service_name,
)


class TestServiceConfig(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        root = Path(self.tmp.name)
        self.home = root / "home"
        self.cwd = root / "work"
        (self.home / ".config").mkdir(parents=True)
        self.cwd.mkdir()
        self.explicit = root / "explicit.ini"
        self.home_file = self.home / ".config" / "openai.ini"
        self.cwd_file = self.cwd / "openai.ini"

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, path: Path, text: str) -> None:
        path.write_text(text)

    def resolve(self, user_config=None, service=None, environ=None):
        return find_service_config(
            user_config,
            service,
            environ=environ if environ is not None else {},
            home=self.home,
            cwd=self.cwd,
        )

    def test_candidate_order(self):
        self.assertEqual(
            candidate_files(self.explicit, home=self.home, cwd=self.cwd),
            [self.explicit, self.home_file, self.cwd_file],
        )
        self.assertEqual(candidate_files(home=self.home, cwd=self.cwd), [self.home_file, self.cwd_file])

    def test_default_service_name(self):
        self.assertEqual(service_name(), "openai")
        self.assertEqual(service_name("perplexity"), "perplexity")

    def test_explicit_file_wins(self):
        self.write(self.explicit, "[openai]\napi_key = k1\nchat_url = https://one.test/chat\n")
        self.write(self.home_file, "[openai]\napi_key = k2\nchat_url = https://two.test/chat\n")

        credential = self.resolve(self.explicit, environ={"OPENAI_API_KEY": "env"})

        self.assertEqual(credential.api_key, "k1")
        self.assertEqual(credential.endpoint_url, "https://one.test/chat")

    def test_unreadable_sources_are_skipped(self):
        """A missing explicit file and a broken home file do not stop the search"""
        self.write(self.home_file, "this is not an ini file\n")
        self.write(self.cwd_file, "[openai]\napi_key = k3\nchat_url = https://three.test/chat\n")

        credential = self.resolve(self.cwd.parent / "missing.ini")

        self.assertEqual(credential.api_key, "k3")
        self.assertEqual(credential.endpoint_url, "https://three.test/chat")

    def test_file_without_key_does_not_win(self):
        self.write(self.home_file, "[other]\napi_key = nope\n")
        self.write(self.cwd_file, "[openai]\napi_key = k3\nchat_url = https://three.test/chat\n")
        self.assertEqual(self.resolve().api_key, "k3")

    def test_named_service_section(self):
        self.write(
            self.home_file,
            "[openai]\napi_key = k-openai\nchat_url = https://openai.test\n"
            "[perplexity]\napi_key = k-pplx\nchat_url = https://api.perplexity.ai/chat/completions\n",
        )
        credential = self.resolve(service="perplexity")
        self.assertEqual(credential.api_key, "k-pplx")
        self.assertEqual(credential.endpoint_url, "https://api.perplexity.ai/chat/completions")

    def test_key_without_url_still_wins(self):
        """The first key found wins even when its chat_url is missing"""
        self.write(self.home_file, "[openai]\napi_key = k2\n")
        self.write(self.cwd_file, "[openai]\napi_key = k3\nchat_url = https://three.test/chat\n")

        credential = self.resolve(environ={"OPENAI_API_KEY": "env"})

        self.assertEqual(credential.api_key, "k2")
        self.assertEqual(credential.endpoint_url, "")
        self.assertFalse(credential.is_complete)

    def test_environment_fallback(self):
        """With no usable file the env key is paired with the default URL"""
        credential = self.resolve(environ={"OPENAI_API_KEY": "env-key"})
        self.assertEqual(credential.api_key, "env-key")
        self.assertEqual(credential.endpoint_url, DEFAULT_CHAT_URL)
        self.assertTrue(credential.is_complete)

    def test_nothing_found(self):
        self.write(self.home_file, "[openai]\napi_key =\n")
        with self.assertRaises(CredentialNotFound):
            self.resolve(environ={"OPENAI_API_KEY": ""})

    def test_percent_signs_are_literal(self):
        self.write(self.home_file, "[openai]\napi_key = abc%def\nchat_url = https://x.test/?a=%20\n")
        credential = load_service_config(self.home_file)
        self.assertEqual(credential.api_key, "abc%def")
        self.assertEqual(credential.endpoint_url, "https://x.test/?a=%20")

    def test_load_reports_unreadable_file(self):
        with self.assertRaises(ConfigUnreadable) as ctx:
            load_service_config(self.cwd / "absent.ini")
        self.assertEqual(ctx.exception.path, self.cwd / "absent.ini")

    def test_api_key_is_not_in_repr(self):
        credential = self.resolve(environ={"OPENAI_API_KEY": "secret-key"})
        self.assertNotIn("secret-key", repr(credential))

    def test_file_with_byte_order_mark(self):
        """Files saved by editors that prepend a UTF-8 BOM still resolve"""
        self.cwd_file.write_bytes("\ufeff[openai]\napi_key = k\nchat_url = https://x.test/chat\n".encode("utf-8"))

        credential = self.resolve()

        self.assertEqual(credential.api_key, "k")
        self.assertEqual(credential.endpoint_url, "https://x.test/chat")
        self.assertEqual(credential.source, str(self.cwd_file))

    def test_source_names_where_the_key_came_from(self):
        self.write(self.home_file, "[openai]\napi_key = k2\n")
        self.assertEqual(self.resolve().source, str(self.home_file))
        self.home_file.unlink()
        self.assertEqual(self.resolve(environ={"OPENAI_API_KEY": "e"}).source, "OPENAI_API_KEY")
