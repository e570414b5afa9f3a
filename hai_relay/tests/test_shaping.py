import json
import math

from hai_relay.api.shaping import build_completion, iter_completion_chunks, split_chunks


def _decode(frames):
    out = []
    for frame in frames:
        assert frame.startswith("data: ") and frame.endswith("\n\n")
        out.append(frame[len("data: "):-2])
    return out


def test_build_completion_shape():
    obj = build_completion("hello world", "gpt-4o")
    assert obj["id"].startswith("chatcmpl-")
    assert obj["object"] == "chat.completion"
    assert obj["model"] == "gpt-4o"
    assert len(obj["choices"]) == 1
    choice = obj["choices"][0]
    assert choice["message"] == {"role": "assistant", "content": "hello world"}
    assert choice["finish_reason"] == "stop"
    assert obj["usage"] == {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}


def test_stream_chunks_reconstruct_text():
    text = "abcdefghij" * 12 + "xyz"
    payloads = _decode(list(iter_completion_chunks(text, "gpt-4o", chunk_size=50, delay=0)))

    assert payloads[-1] == "[DONE]"
    chunks = [json.loads(p) for p in payloads[:-1]]
    content_frames, terminal = chunks[:-1], chunks[-1]

    assert len(content_frames) == math.ceil(len(text) / 50)
    assert "".join(c["choices"][0]["delta"]["content"] for c in content_frames) == text
    assert all(c["choices"][0]["finish_reason"] is None for c in content_frames)
    assert all(c["choices"][0]["index"] == 0 for c in content_frames)
    assert terminal["choices"][0]["delta"] == {}
    assert terminal["choices"][0]["finish_reason"] == "stop"
    assert len({c["id"] for c in chunks}) == 1
    assert payloads.count("[DONE]") == 1


def test_stream_empty_text_has_only_terminal_frames():
    payloads = _decode(list(iter_completion_chunks("", "m", delay=0)))
    assert len(payloads) == 2
    assert json.loads(payloads[0])["choices"][0]["finish_reason"] == "stop"
    assert payloads[1] == "[DONE]"


def test_split_chunks_keeps_multibyte_characters_whole():
    text = "你好😀" * 30
    pieces = split_chunks(text, 50)
    assert "".join(pieces) == text
    assert all(len(p) <= 50 for p in pieces)
    assert all("�" not in p for p in pieces)


def test_stream_delay_between_content_frames(monkeypatch):
    sleeps = []
    monkeypatch.setattr("hai_relay.api.shaping.time.sleep", sleeps.append)
    list(iter_completion_chunks("x" * 120, "m", chunk_size=50, delay=0.05))
    assert sleeps == [0.05, 0.05, 0.05]
