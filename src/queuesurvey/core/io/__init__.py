from .fs import ensure_dir
from .json import dump_json
from .video import VideoInfo, open_video, get_video_info, iter_frames

__all__ = [
    "ensure_dir",
    "dump_json",
    "VideoInfo",
    "open_video",
    "get_video_info",
    "iter_frames",
]
