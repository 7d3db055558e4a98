"""StepFun Speech Recognition Basic Usage Example

This example transcribes a local file and a remote file with the ASR node.
"""

from stepfun_nodes.host import LocalHost
from stepfun_nodes.models import BinaryData, Item
from stepfun_nodes.nodes.asr import StepFunAsrNode

node = StepFunAsrNode()

# 1. Transcribe a local file passed as binary data
audio_path = "input.wav"  # make sure the file exists
with open(audio_path, "rb") as f:
    item = Item(binary={"data": BinaryData(
        data=f.read(), file_name="input.wav", mime_type="audio/wav"
    )})

host = LocalHost(
    items=[item],
    parameters={"language": "zh", "responseFormat": "json"},
)
print(node.execute(host)[0].json["text"])

# 2. Transcribe a remote file as subtitles
host = LocalHost(parameters={
    "audioSource": "url",
    "audioUrl": "https://example.com/podcast.mp3",
    "responseFormat": "srt",
})
print(node.execute(host)[0].json["text"])
