# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-26
# Description: test_openai_clients.py
# -----------------------------------------------------------------------------
import subprocess
from types import SimpleNamespace

import numpy as np
import pytest

from chat.OpenAIChat import LLMConfig, OpenAIChat
from config.Config import Config
from embedding.OpenAIEmbedder import OpenAIEmbedder
from media.FfmpegAudioExtractor import FfmpegAudioExtractor
from transcription.WhisperTranscriber import WhisperTranscriber
from utility.errors import ConfigurationError, MediaExtractionError, ProviderError

CFG = Config(openai_api_key="sk-test")


class _Embeddings:
    def __init__(self, dim=3, fail_times=0, drop_one=False):
        self.dim = dim
        self.fail_times = fail_times
        self.drop_one = drop_one
        self.calls = []

    def create(self, model, input):
        self.calls.append((model, list(input)))
        if self.fail_times:
            self.fail_times -= 1
            raise TimeoutError("read timed out")
        items = [
            SimpleNamespace(index=i, embedding=[float(i + 1)] + [0.0] * (self.dim - 1))
            for i in range(len(input))
        ]
        if self.drop_one:
            items = items[:-1]
        # provider may answer out of order
        return SimpleNamespace(data=list(reversed(items)))


def _embedder(embeddings, **kw):
    client = SimpleNamespace(embeddings=embeddings)
    return OpenAIEmbedder(CFG, client=client, retry_delay=0.0, **kw)


def test_embed_batch_preserves_order_and_normalises():
    emb = _Embeddings()
    vectors = _embedder(emb, normalize=True).embed_batch(["a", "b", "c"])

    assert len(vectors) == 3
    assert all(np.linalg.norm(v) == pytest.approx(1.0, abs=1e-5) for v in vectors)
    assert len(emb.calls) == 1

    raw = _embedder(emb, normalize=False).embed_batch(["a", "b", "c"])
    assert [float(v[0]) for v in raw] == [1.0, 2.0, 3.0]


def test_embed_batch_splits_by_batch_size():
    emb = _Embeddings()
    vectors = _embedder(emb, batch_size=2, normalize=False).embed_batch(["a", "b", "c", "d", "e"])

    assert [len(c[1]) for c in emb.calls] == [2, 2, 1]
    assert [float(v[0]) for v in vectors] == [1.0, 2.0, 1.0, 2.0, 1.0]
    assert _embedder(emb).embed_batch([]) == []


def test_embedder_retries_then_succeeds():
    emb = _Embeddings(fail_times=2)
    vec = _embedder(emb, max_retries=3).embed("hello")
    assert vec.shape == (3,)
    assert len(emb.calls) == 3


def test_embedder_exhausted_retries_raise_provider_error():
    emb = _Embeddings(fail_times=5)
    with pytest.raises(ProviderError):
        _embedder(emb, max_retries=2).embed("hello")


def test_embedder_length_mismatch_is_provider_error():
    with pytest.raises(ProviderError):
        _embedder(_Embeddings(drop_one=True)).embed_batch(["a", "b"])


def test_embedder_without_key_fails_at_first_use():
    embedder = OpenAIEmbedder(Config())
    with pytest.raises(ConfigurationError):
        embedder.embed("hello")
    assert embedder.healthcheck() is False


def _chat_client(content="Hi there", stream_deltas=("Hi", None, " there"), fail=False):
    class _Stream:
        def __init__(self):
            self.closed = False

        def __iter__(self):
            for d in stream_deltas:
                yield SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=d))])

        def close(self):
            self.closed = True

    state = SimpleNamespace(calls=[], streams=[])

    def create(**params):
        state.calls.append(params)
        if fail:
            raise ConnectionError("connection reset")
        if params.get("stream"):
            s = _Stream()
            state.streams.append(s)
            return s
        return SimpleNamespace(
            model=params["model"],
            usage=None,
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        )

    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return client, state


def test_chat_complete_uses_defaults_and_overrides():
    client, state = _chat_client()
    chat = OpenAIChat(cfg=CFG, client=client)
    msgs = [{"role": "user", "content": "hello"}]

    assert chat.complete(msgs) == "Hi there"
    assert state.calls[0]["model"] == "gpt-4o-mini"
    assert state.calls[0]["temperature"] == 0.7
    assert state.calls[0]["max_tokens"] == 2000

    chat.complete(msgs, chat.defaults.merged({"temperature": 0.2, "max_tokens": None}))
    assert state.calls[1]["temperature"] == 0.2
    assert state.calls[1]["max_tokens"] == 2000


def test_chat_model_from_config():
    client, state = _chat_client()
    chat = OpenAIChat(cfg=Config(openai_api_key="k", openai_chat_model="gpt-4o"), client=client)
    chat.simple_chat("hello", system_text="be brief")
    assert state.calls[0]["model"] == "gpt-4o"
    assert state.calls[0]["messages"][0]["role"] == "system"


def test_chat_stream_skips_empty_deltas_and_closes():
    client, state = _chat_client()
    chat = OpenAIChat(cfg=CFG, client=client)

    tokens = list(chat.chat_stream([{"role": "user", "content": "hello"}]))
    assert tokens == ["Hi", " there"]
    assert state.calls[0]["stream"] is True
    assert state.streams[0].closed


def test_chat_stream_close_early_closes_http_stream():
    client, state = _chat_client()
    chat = OpenAIChat(cfg=CFG, client=client)

    gen = chat.chat_stream([{"role": "user", "content": "hello"}])
    assert next(gen) == "Hi"
    gen.close()
    assert state.streams[0].closed


def test_chat_errors():
    client, _ = _chat_client(fail=True)
    chat = OpenAIChat(cfg=CFG, client=client)

    with pytest.raises(ValueError):
        chat.complete([])
    with pytest.raises(ValueError):
        chat.complete([{"role": "robot", "content": "x"}])
    with pytest.raises(ProviderError):
        chat.complete([{"role": "user", "content": "x"}])
    assert chat.healthcheck() is False

    with pytest.raises(ConfigurationError):
        OpenAIChat(cfg=Config()).complete([{"role": "user", "content": "x"}])


def test_llm_config_merge_ignores_unknown_and_none():
    base = LLMConfig(model_name="m", temperature=0.5, max_tokens=10)
    merged = base.merged({"temperature": None, "max_tokens": 20, "top_k": 3})
    assert merged == LLMConfig(model_name="m", temperature=0.5, max_tokens=20)


def test_whisper_transcriber_request_shape():
    calls = []

    def create(**params):
        calls.append(params)
        return "hello from the recording\n"

    client = SimpleNamespace(audio=SimpleNamespace(transcriptions=SimpleNamespace(create=create)))
    transcriber = WhisperTranscriber(CFG, client=client)

    assert transcriber.transcribe(b"mp3-bytes", "a.mp3", "audio/mpeg") == "hello from the recording\n"
    assert calls[0]["model"] == "whisper-1"
    assert calls[0]["response_format"] == "text"
    assert calls[0]["file"] == ("a.mp3", b"mp3-bytes", "audio/mpeg")
    assert transcriber.transcribe(b"", "a.mp3", "audio/mpeg") == ""


def test_whisper_transcriber_errors():
    def create(**params):
        raise ConnectionError("boom")

    client = SimpleNamespace(audio=SimpleNamespace(transcriptions=SimpleNamespace(create=create)))
    with pytest.raises(ProviderError):
        WhisperTranscriber(CFG, client=client).transcribe(b"x", "a.mp3", "audio/mpeg")
    with pytest.raises(ConfigurationError):
        WhisperTranscriber(Config()).transcribe(b"x", "a.mp3", "audio/mpeg")


def test_ffmpeg_command_shape(tmp_path):
    cmd = FfmpegAudioExtractor(binary="ffmpeg").build_command(tmp_path / "in.mp4", tmp_path / "out.mp3")
    assert cmd[0] == "ffmpeg"
    assert "-vn" in cmd
    assert cmd[cmd.index("-acodec") + 1] == "libmp3lame"
    assert cmd[cmd.index("-ab") + 1] == "128k"
    assert cmd[cmd.index("-ac") + 1] == "1"
    assert cmd[cmd.index("-ar") + 1] == "16000"


def test_ffmpeg_failures_become_media_extraction_errors(tmp_path, monkeypatch):
    extractor = FfmpegAudioExtractor(binary="definitely-not-ffmpeg-binary")
    with pytest.raises(MediaExtractionError):
        extractor.extract_audio_track(tmp_path / "in.mp4", tmp_path / "out.mp3")

    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="Invalid data found")

    monkeypatch.setattr(subprocess, "run", fake_run)
    with pytest.raises(MediaExtractionError, match="Invalid data found"):
        FfmpegAudioExtractor().extract_audio_track(tmp_path / "in.mp4", tmp_path / "out.mp3")

    def slow_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout"))

    monkeypatch.setattr(subprocess, "run", slow_run)
    with pytest.raises(MediaExtractionError, match="timed out"):
        FfmpegAudioExtractor(timeout=1).extract_audio_track(tmp_path / "in.mp4", tmp_path / "out.mp3")
