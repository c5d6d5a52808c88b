import json

from menustudio.client.storage import FileTokenStorage


class TestFileTokenStorage:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "auth" / "tokens.json"
        storage = FileTokenStorage(str(path))
        storage.set_item("sb-proj-auth-token", '{"access_token": "a"}')

        assert json.loads(path.read_text()) == {"sb-proj-auth-token": '{"access_token": "a"}'}
        assert FileTokenStorage(str(path)).get_item("sb-proj-auth-token") == '{"access_token": "a"}'

    def test_remove(self, tmp_path):
        path = tmp_path / "tokens.json"
        storage = FileTokenStorage(str(path))
        storage.set_item("a", "1")
        storage.remove_item("a")
        assert FileTokenStorage(str(path)).keys() == []

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "tokens.json"
        path.write_text("{not json")
        assert FileTokenStorage(str(path)).keys() == []
