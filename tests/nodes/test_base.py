"""Unit tests for the node framework."""

import pytest

from stepfun_nodes.errors import NodeApiError, NodeOperationError
from stepfun_nodes.models import Item
from stepfun_nodes.nodes import (
    StepFunAsrNode,
    StepFunTtsNode,
    get_node_class,
    list_nodes,
)
from stepfun_nodes.nodes.asr import ASR_PROPERTIES
from stepfun_nodes.nodes.base import (
    ItemFailure,
    ItemSuccess,
    KIND_API,
    KIND_VALIDATION,
    collect_results,
    resolve_parameters,
    visible_properties,
)
from stepfun_nodes.nodes.tts import TTS_PROPERTIES


def names(properties):
    return [prop.name for prop in properties]


class TestVisibleProperties:
    """Tests for the visibility derivation."""

    def test_binary_source_by_default(self):
        visible = names(visible_properties(ASR_PROPERTIES, {}))

        assert "binaryPropertyName" in visible
        assert "audioUrl" not in visible

    def test_url_source(self):
        visible = names(
            visible_properties(ASR_PROPERTIES, {"audioSource": "url"})
        )

        assert "audioUrl" in visible
        assert "binaryPropertyName" not in visible

    def test_custom_mime_type_only_for_custom(self):
        preset = names(
            visible_properties(TTS_PROPERTIES, {"mimeType": "audio/wav"})
        )
        custom = names(
            visible_properties(TTS_PROPERTIES, {"mimeType": "custom"})
        )

        assert "customMimeType" not in preset
        assert "customMimeType" in custom

    def test_resolve_parameters_fills_defaults(self):
        resolved = resolve_parameters(
            ASR_PROPERTIES,
            {"audioSource": "url", "audioUrl": "https://x/a.wav"}
        )

        assert resolved["audioUrl"] == "https://x/a.wav"
        assert resolved["endpointPath"] == "/audio/transcriptions"
        assert resolved["model"] == "step-asr-mini"
        assert "binaryPropertyName" not in resolved


class TestCollectResults:
    """Tests for the result reducer."""

    def failure(self, index):
        error = NodeApiError({"message": "boom"}, index)
        return ItemFailure(index, KIND_API, error.payload, error)

    def test_successes_kept_in_order(self):
        results = [ItemSuccess(i, Item(json={"i": i}, paired_item=i))
                   for i in range(3)]

        output = collect_results(results)

        assert [item.json["i"] for item in output] == [0, 1, 2]

    def test_first_failure_raised_and_rest_not_consumed(self):
        consumed = []

        def results():
            for i in range(3):
                consumed.append(i)
                if i == 1:
                    yield self.failure(i)
                else:
                    yield ItemSuccess(i, Item(paired_item=i))

        with pytest.raises(NodeApiError) as exc_info:
            collect_results(results())

        assert exc_info.value.item_index == 1
        assert consumed == [0, 1]

    def test_continue_on_fail_emits_error_items(self):
        results = [
            ItemSuccess(0, Item(paired_item=0)),
            self.failure(1),
        ]

        output = collect_results(results, continue_on_fail=True)

        assert len(output) == 2
        assert output[1].paired_item == 1
        assert output[1].json["errorKind"] == KIND_API
        assert output[1].json["details"] == {"message": "boom"}
        assert "[item 1]" in output[1].json["error"]


class TestParameters:
    """Tests for parameter resolution and checks."""

    def test_invalid_option_rejected(self, make_host):
        host = make_host(parameters={"responseFormat": "xml"})

        with pytest.raises(NodeOperationError):
            StepFunAsrNode().get_parameter(host, "responseFormat", 0)

    def test_number_not_numeric(self, make_host):
        host = make_host(parameters={"speed": "fast"})

        with pytest.raises(NodeOperationError):
            StepFunTtsNode().get_parameter(host, "speed", 0)

    def test_empty_number_is_none(self, make_host):
        host = make_host(parameters={"volume": ""})

        assert StepFunTtsNode().get_parameter(host, "volume", 0) is None

    def test_default_used_when_missing(self, make_host):
        host = make_host()

        assert StepFunTtsNode().get_parameter(
            host, "outputFormat", 0
        ) == "mp3"

    def test_validation_failure_kind(self, make_host):
        host = make_host(parameters={"text": ""}, continue_on_fail=True)

        output = StepFunTtsNode().execute(host)

        assert output[0].json["errorKind"] == KIND_VALIDATION


class TestRegistry:
    """Tests for the node registry."""

    def test_nodes_registered(self):
        assert list_nodes() == ["stepFunAsr", "stepFunTts"]
        assert get_node_class("stepFunTts") is StepFunTtsNode
        assert get_node_class("stepFunAsr") is StepFunAsrNode

    def test_unknown_node(self):
        with pytest.raises(ValueError, match="Unknown node type"):
            get_node_class("missing")

    def test_unknown_load_options_method(self, make_host):
        with pytest.raises(ValueError):
            StepFunTtsNode().load_options("getModels", make_host())

    def test_descriptions_reference_credential(self):
        for node_class in (StepFunAsrNode, StepFunTtsNode):
            assert node_class.description.credentials == ["stepFunApi"]
