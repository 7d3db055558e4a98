"""StepFun Text-to-Speech Basic Usage Example

This example runs the TTS node with the standalone host and saves the
synthesized audio next to this script.

Set STEPFUN_API_KEY (and optionally STEPFUN_BASE_URL) before running.
"""

from stepfun_nodes.host import LocalHost
from stepfun_nodes.models import Item
from stepfun_nodes.nodes.tts import StepFunTtsNode

node = StepFunTtsNode()

# 1. List the available voices
host = LocalHost()
voices = node.load_options("getVoices", host)
for voice in voices[:5]:
    print(f"{voice['value']}: {voice['name']}")

# 2. Synthesize one file per item
items = [
    Item(json={"line": "你好，欢迎使用阶跃星辰语音合成。"}),
    Item(json={"line": "Hello from StepFun."}),
]
host = LocalHost(
    items=items,
    parameters={
        "text": lambda item: item.json["line"],
        "voice": voices[0]["value"] if voices else "",
        "outputFormat": "wav",
        "speed": 1.1,
        "fileName": "greeting",
    },
)

for index, result in enumerate(node.execute(host)):
    binary = result.binary["audio"]
    path = f"{index}-{binary.file_name}"
    with open(path, "wb") as f:
        f.write(binary.data)
    print(f"Saved {path} ({binary.mime_type})")
