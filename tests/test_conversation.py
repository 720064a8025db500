from models.conversation import (
    UNKNOWN_PREVIEW,
    has_image_content,
    last_user_preview,
    with_system_message,
)


def test_has_image_content():
    assert not has_image_content([{"role": "user", "content": "texto"}])
    assert not has_image_content([{"role": "user", "content": [{"type": "text", "text": "oi"}]}])
    assert has_image_content(
        [
            {"role": "user", "content": "primeira"},
            {"role": "user", "content": [{"type": "image_url", "image_url": {"url": "http://x/y.png"}}]},
        ]
    )


def test_with_system_message():
    conv = [{"role": "user", "content": "oi"}]

    assert with_system_message(conv, "") == conv
    assert with_system_message(conv, "") is not conv
    assert with_system_message(conv, "Seja breve.") == [
        {"role": "system", "content": "Seja breve."},
        {"role": "user", "content": "oi"},
    ]


def test_last_user_preview():
    conv = [
        {"role": "user", "content": "primeira"},
        {"role": "assistant", "content": "resposta"},
        {"role": "user", "content": "y" * 400},
    ]
    assert last_user_preview(conv) == "y" * 300


def test_last_user_preview_for_multipart_or_missing():
    assert last_user_preview([{"role": "user", "content": [{"type": "text", "text": "oi"}]}]) == UNKNOWN_PREVIEW
    assert last_user_preview([{"role": "assistant", "content": "so assistente"}]) == UNKNOWN_PREVIEW
