import pytest

import app.services.llm_client as llm


def _enable(monkeypatch, model="mistral.ministral-3-8b-instruct"):
    monkeypatch.setattr(llm.settings, "bedrock_llm_enabled", True)
    monkeypatch.setattr(llm.settings, "bedrock_llm_model_id", model)
    monkeypatch.setattr(llm.settings, "aws_region", "us-west-2")


def test_call_bedrock_llm_tries_typo_fallback_model(monkeypatch):
    class _Client:
        def __init__(self):
            self.calls = 0

        def converse(self, modelId, messages, inferenceConfig):
            self.calls += 1
            if "ministral" in modelId:
                raise RuntimeError("bad model id")
            return {"output": {"message": {"content": [{"text": "ok-response"}]}}}

    fake = _Client()
    _enable(monkeypatch)
    monkeypatch.setattr(llm, "boto3", type("B", (), {"client": lambda *args, **kwargs: fake}))
    assert llm._call_bedrock_llm("prompt") == "ok-response"
    assert fake.calls == 2


def test_call_bedrock_llm_raises_when_all_models_fail(monkeypatch):
    class _Client:
        def converse(self, modelId, messages, inferenceConfig):
            raise RuntimeError("always fail")

    _enable(monkeypatch)
    monkeypatch.setattr(llm, "boto3", type("B", (), {"client": lambda *args, **kwargs: _Client()}))
    with pytest.raises(RuntimeError):
        llm._call_bedrock_llm("prompt")


def test_call_llm_refuses_when_disabled(monkeypatch):
    monkeypatch.setattr(llm.settings, "bedrock_llm_enabled", False)
    assert llm.is_llm_enabled() is False
    with pytest.raises(RuntimeError):
        llm.call_llm("prompt")


def test_extract_json_object_direct_fenced_and_embedded():
    assert llm.extract_json_object('{"score": 80}') == {"score": 80}
    assert llm.extract_json_object('```json\n{"score": 81}\n```') == {"score": 81}
    assert llm.extract_json_object('Here you go:\n{"score": 82, "gaps": []}\nThanks!') == {"score": 82, "gaps": []}


def test_extract_json_object_rejects_non_objects():
    assert llm.extract_json_object("") is None
    assert llm.extract_json_object("no json here") is None
    assert llm.extract_json_object("[1, 2, 3]") is None
    assert llm.extract_json_object("{broken json}") is None


def test_ask_for_json_raises_without_object(monkeypatch):
    _enable(monkeypatch)
    monkeypatch.setattr(llm, "_call_bedrock_llm", lambda prompt, **kw: "sorry, I cannot help")
    with pytest.raises(ValueError):
        llm.ask_for_json("prompt")

    monkeypatch.setattr(llm, "_call_bedrock_llm", lambda prompt, **kw: '{"title": "Designer"}')
    assert llm.ask_for_json("prompt") == {"title": "Designer"}


def test_candidate_model_ids(monkeypatch):
    monkeypatch.setattr(llm.settings, "bedrock_llm_model_id", "anthropic.claude-3-haiku")
    assert llm._candidate_model_ids() == ["anthropic.claude-3-haiku"]
    monkeypatch.setattr(llm.settings, "bedrock_llm_model_id", "mistral.ministral-3-8b-instruct")
    assert llm._candidate_model_ids() == ["mistral.ministral-3-8b-instruct", "mistral.mistral-3-8b-instruct"]


def test_call_bedrock_llm_inference_config(monkeypatch):
    seen = {}

    class _Client:
        def converse(self, modelId, messages, inferenceConfig):
            seen.update(inferenceConfig, model=modelId, text=messages[0]["content"][0]["text"])
            return {"output": {"message": {"content": [{"text": " hi "}, "skip", {"text": "there"}]}}}

    _enable(monkeypatch, model="anthropic.claude-3-haiku")
    monkeypatch.setattr(llm.settings, "bedrock_llm_temperature", 0.5)
    monkeypatch.setattr(llm, "_runtime_client", lambda timeout: _Client())
    assert llm.call_llm("write a cover letter", max_tokens=300) == "hi there"
    assert seen == {"maxTokens": 300, "temperature": 0.5, "model": "anthropic.claude-3-haiku", "text": "write a cover letter"}
