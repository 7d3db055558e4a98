"""Workflow nodes for the StepFun speech API.

Nodes:
- StepFunTtsNode (stepFunTts): text-to-speech, audio returned as binary data
- StepFunAsrNode (stepFunAsr): speech-to-text from binary data or a URL
"""

from stepfun_nodes.nodes.base import (
    BaseNode,
    NodeDescription,
    NodeProperty,
    ItemSuccess,
    ItemFailure,
    collect_results,
    visible_properties,
    resolve_parameters,
    get_node_class,
    list_nodes,
)
from stepfun_nodes.nodes.asr import StepFunAsrNode
from stepfun_nodes.nodes.tts import StepFunTtsNode

__all__ = [
    'BaseNode',
    'NodeDescription',
    'NodeProperty',
    'ItemSuccess',
    'ItemFailure',
    'collect_results',
    'visible_properties',
    'resolve_parameters',
    'get_node_class',
    'list_nodes',
    'StepFunAsrNode',
    'StepFunTtsNode',
]
