import io
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException, UploadFile
from PIL import Image

from menustudio.modules.menu_photos.service import MenuPhotoService, generate_thumbnail
from tests.conftest import FakeSupabase


def png_bytes(size=(800, 600)):
    buf = io.BytesIO()
    Image.new("RGB", size, (200, 80, 40)).save(buf, "PNG")
    return buf.getvalue()


def photo_row(**overrides):
    row = {
        "id": "p1",
        "name": "Smash Burger",
        "category": "Uploaded",
        "original_url": "https://x.supabase.co/storage/v1/object/public/menu-photos/org-1/p1.png",
        "thumbnail_url": "https://x.supabase.co/storage/v1/object/public/menu-photos/org-1/thumbnails/p1.jpg",
        "sort_order": 0,
        "user_id": "user-1",
        "organization_id": "org-1",
        "created_at": "2026-03-01T12:00:00Z",
    }
    row.update(overrides)
    return row


class TestThumbnail:
    def test_longer_side_capped(self):
        with Image.open(io.BytesIO(generate_thumbnail(png_bytes((1600, 900))))) as img:
            assert img.format == "JPEG"
            assert img.size == (400, 225)


class TestUpload:
    @pytest.mark.asyncio
    async def test_stores_original_and_thumbnail(self, org_ctx):
        supabase = FakeSupabase({"menu_photos": [[photo_row()]]})
        storage = MagicMock()
        storage.upload.side_effect = lambda content, path, content_type: f"https://cdn.example/{path}"
        service = MenuPhotoService(supabase, storage=storage)

        photo = await service.upload_photo(UploadFile(io.BytesIO(png_bytes()), filename="Smash Burger.png"), org_ctx)

        assert photo.id == "p1"
        (original_call, thumb_call) = storage.upload.call_args_list
        assert original_call.args[1].startswith("org-1/") and original_call.args[1].endswith(".png")
        assert original_call.args[2] == "image/png"
        assert "/thumbnails/" in thumb_call.args[1] and thumb_call.args[2] == "image/jpeg"
        inserted = supabase.queries_for("menu_photos")[0].called("insert")[0][0]
        assert inserted["name"] == "Smash Burger"
        assert inserted["organization_id"] == "org-1"

    @pytest.mark.asyncio
    async def test_rejects_non_image(self, org_ctx):
        storage = MagicMock()
        service = MenuPhotoService(FakeSupabase(), storage=storage)

        with pytest.raises(HTTPException) as exc_info:
            await service.upload_photo(UploadFile(io.BytesIO(b"GIF89a..."), filename="x.gif"), org_ctx)

        assert exc_info.value.status_code == 400
        storage.upload.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_insert_removes_uploads(self, org_ctx):
        supabase = FakeSupabase({"menu_photos": [RuntimeError("insert failed")]})
        storage = MagicMock()
        storage.upload.side_effect = ["https://cdn.example/a.png", "https://cdn.example/a.jpg"]
        service = MenuPhotoService(supabase, storage=storage)

        with pytest.raises(HTTPException) as exc_info:
            await service.upload_photo(UploadFile(io.BytesIO(png_bytes()), filename="a.png"), org_ctx)

        assert exc_info.value.status_code == 500
        storage.remove.assert_called_once_with(["https://cdn.example/a.png", "https://cdn.example/a.jpg"])


class TestScoping:
    def test_list_scoped_to_organization(self, org_ctx):
        supabase = FakeSupabase({"menu_photos": [[photo_row()]]})
        MenuPhotoService(supabase, storage=MagicMock()).list_photos(org_ctx)

        query = supabase.queries_for("menu_photos")[0]
        assert ("organization_id", "org-1") in query.called("eq")
        assert ("deleted_at", "null") in query.called("is_")

    def test_list_scoped_to_user_without_organization(self, solo_ctx):
        supabase = FakeSupabase({"menu_photos": [[]]})
        MenuPhotoService(supabase, storage=MagicMock()).list_photos(solo_ctx)
        assert ("user_id", "user-1") in supabase.queries_for("menu_photos")[0].called("eq")

    def test_soft_delete_marks_trash(self, org_ctx):
        supabase = FakeSupabase({"menu_photos": [[photo_row()]]})
        assert MenuPhotoService(supabase, storage=MagicMock()).soft_delete_photo("p1", org_ctx) is True
        update = supabase.queries_for("menu_photos")[0].called("update")[0][0]
        assert update["deleted_by"] == "user-1"
        assert update["deleted_at"]

    def test_rename_missing_photo(self, org_ctx):
        supabase = FakeSupabase({"menu_photos": [[]]})
        with pytest.raises(HTTPException) as exc_info:
            MenuPhotoService(supabase, storage=MagicMock()).rename_photo("nope", "New", org_ctx)
        assert exc_info.value.status_code == 404

    def test_reorder_writes_positions(self, org_ctx):
        supabase = FakeSupabase({"menu_photos": [[photo_row()]]})
        MenuPhotoService(supabase, storage=MagicMock()).reorder_photos(["p2", "p1"], org_ctx)
        updates = [q.called("update")[0][0] for q in supabase.queries_for("menu_photos") if q.called("update")]
        assert updates == [{"sort_order": 0}, {"sort_order": 1}]


class TestTrash:
    def test_list_trash_enriched(self):
        trashed = photo_row(deleted_at="2026-03-05T09:00:00Z", deleted_by="user-2")
        supabase = FakeSupabase({
            "menu_photos": [[trashed]],
            "profiles": [[{"id": "user-2", "email": "chef@staxburger.com"}]],
            "organizations": [[{"id": "org-1", "name": "Stax Burger Co."}]],
        })

        items = MenuPhotoService(supabase, storage=MagicMock()).list_trash()

        assert len(items) == 1
        assert items[0].deleted_by_email == "chef@staxburger.com"
        assert items[0].organization_name == "Stax Burger Co."
        assert supabase.queries_for("menu_photos")[0].called("order") == [("deleted_at",)]

    def test_empty_trash_skips_lookups(self):
        supabase = FakeSupabase({"menu_photos": [[]]})
        assert MenuPhotoService(supabase, storage=MagicMock()).list_trash() == []
        assert supabase.queries_for("profiles") == []

    def test_permanent_delete_removes_files(self):
        row = photo_row()
        supabase = FakeSupabase({"menu_photos": [[row]]})
        storage = MagicMock()

        MenuPhotoService(supabase, storage=storage).permanently_delete_photo("p1")

        storage.remove.assert_called_once_with([row["original_url"], row["thumbnail_url"]])

    def test_purge_expired(self):
        rows = [photo_row(id="p1"), photo_row(id="p2")]
        supabase = FakeSupabase({"menu_photos": [rows]})
        storage = MagicMock()

        purged = MenuPhotoService(supabase, storage=storage).purge_expired_trash(retention_days=30)

        assert purged == 2
        assert storage.remove.call_count == 2
        query = supabase.queries_for("menu_photos")[0]
        assert query.called("lt")[0][0] == "deleted_at"
