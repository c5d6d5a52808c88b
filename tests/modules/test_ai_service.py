from unittest.mock import AsyncMock, MagicMock

import pytest

from menustudio.modules.ai.images import to_data_url
from menustudio.modules.ai.schemas import ChatRequest, EditImageRequest, GenerateImageRequest, MenuImageRequest
from menustudio.modules.ai.service import AIService
from tests.conftest import FakeSupabase

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def make_service(supabase=None, master_prompt=""):
    gateway = MagicMock()
    gateway.generate_images = AsyncMock(return_value=(["data:image/png;base64,AAA"], "moody light"))
    gateway.generate_menu_image = AsyncMock(return_value=(to_data_url(PNG, "image/png"), "Enjoy!"))
    gateway.edit_image = AsyncMock(return_value="data:image/png;base64,RURJVA==")
    gateway.open_chat_stream = AsyncMock(return_value="stream")
    settings_service = MagicMock()
    settings_service.get_master_prompt.return_value = master_prompt
    storage = MagicMock()
    storage.upload.return_value = "https://cdn.example/generated/x.png"
    service = AIService(gateway, supabase or FakeSupabase(), storage=storage, settings_service=settings_service)
    return service, gateway, storage


class TestGenerateImage:
    @pytest.mark.asyncio
    async def test_master_prompt_prepended(self):
        service, gateway, _ = make_service(master_prompt="Always warm lighting")
        request = GenerateImageRequest(prompt="weekend burger", photoAmount=2, imageUrls=["u1"], photoNames=["Burger"])

        result = await service.generate_image(request)

        assert result.images == ["data:image/png;base64,AAA"]
        assert result.reasoning == "moody light"
        args, kwargs = gateway.generate_images.await_args
        assert args[0] == "Always warm lighting\n\nweekend burger"
        assert kwargs["photo_amount"] == 2
        assert kwargs["image_urls"] == ["u1"]
        assert kwargs["photo_names"] == ["Burger"]

    @pytest.mark.asyncio
    async def test_no_master_prompt(self):
        service, gateway, _ = make_service()
        await service.generate_image(GenerateImageRequest(prompt="tacos"))
        assert gateway.generate_images.await_args.args[0] == "tacos"


class TestMenuImage:
    @pytest.mark.asyncio
    async def test_uploads_data_url(self):
        service, gateway, storage = make_service()

        result = await service.generate_menu_image(MenuImageRequest(prompt="on a wooden board", menuItem="Loaded Fries"))

        assert result.image_url == "https://cdn.example/generated/x.png"
        assert result.text_content == "Enjoy!"
        assert result.prompt.startswith("Professional food photography of Loaded Fries.")
        content, path, content_type = storage.upload.call_args.args
        assert content == PNG
        assert path.startswith("generated/") and path.endswith(".png")
        assert content_type == "image/png"

    @pytest.mark.asyncio
    async def test_upload_failure_keeps_data_url(self):
        service, _, storage = make_service()
        storage.upload.side_effect = RuntimeError("bucket missing")

        result = await service.generate_menu_image(MenuImageRequest(prompt="fries"))

        assert result.image_url.startswith("data:image/png;base64,")

    def test_remote_url_not_reuploaded(self):
        service, _, storage = make_service()
        assert service.store_generated_image("https://cdn.example/a.png") == "https://cdn.example/a.png"
        storage.upload.assert_not_called()


class TestChat:
    @pytest.mark.asyncio
    async def test_system_prompt_includes_menu_and_analytics(self, org_ctx):
        supabase = FakeSupabase({"menu_photos": [[{"name": "Smash Burger", "category": "Burgers"}]]})
        service, gateway, _ = make_service(supabase)

        await service.chat_stream(
            ChatRequest(messages=[{"role": "user", "content": "ideas?"}], analyticsContext="Total photos: 3"),
            org_ctx,
        )

        messages, system_prompt = gateway.open_chat_stream.await_args.args
        assert messages == [{"role": "user", "content": "ideas?"}]
        assert "Stax Burger Co." in system_prompt
        assert "Total photos: 3" in system_prompt
        assert "- Smash Burger (Burgers)" in system_prompt

    @pytest.mark.asyncio
    async def test_menu_failure_does_not_block_chat(self, solo_ctx):
        supabase = FakeSupabase({"menu_photos": [RuntimeError("boom")]})
        service, gateway, _ = make_service(supabase)

        await service.chat_stream(ChatRequest(messages=[{"role": "user", "content": "hi"}]), solo_ctx)

        system_prompt = gateway.open_chat_stream.await_args.args[1]
        assert "your restaurant" in system_prompt
        assert "No analytics data available." in system_prompt


class TestEditImage:
    @pytest.mark.asyncio
    async def test_passes_options(self):
        service, gateway, _ = make_service()

        result = await service.edit_image(EditImageRequest(imageUrl="https://cdn.example/a.png", editPrompt="add steam", aspectRatio="16:9"))

        assert result.image == "data:image/png;base64,RURJVA=="
        gateway.edit_image.assert_awaited_once_with("https://cdn.example/a.png", "add steam", "1K", "16:9")
