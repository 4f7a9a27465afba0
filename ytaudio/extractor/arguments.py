"""yt-dlp argument construction.

Download arguments are composed from named flag groups that are always
emitted in the same order (metadata-only runs use a leading ``json`` group):

1. extraction  ``-x --audio-format FMT --audio-quality 0``
2. artwork     ``--embed-thumbnail`` (only for thumbnail-capable formats)
3. metadata    ``--embed-metadata --parse-metadata RULE``
4. output      ``-o TEMPLATE``
5. behaviour   ``--no-warnings --no-playlist``
6. target      the source URL, always last
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ytaudio.core.media import supports_thumbnail
from ytaudio.models.audio import ExtractionRequest

# Copies the video description into the comment tag
DESCRIPTION_TO_COMMENT_RULE = "description:(?s)(?P<meta_comment>.+)"

OUTPUT_FILENAME_TEMPLATE = "%(title)s.%(ext)s"

BEST_AUDIO_QUALITY = "0"


@dataclass(frozen=True)
class FlagGroup:
    """A named, ordered run of command line arguments."""

    name: str
    args: Tuple[str, ...]


class ArgumentBuilder:
    """Builds yt-dlp argument lists from flag groups in a fixed order."""

    GROUP_ORDER: Tuple[str, ...] = (
        "json",
        "extraction",
        "artwork",
        "metadata",
        "output",
        "behaviour",
        "target",
    )

    def __init__(self) -> None:
        self._groups: Dict[str, FlagGroup] = {}

    def _set(self, name: str, *args: str) -> "ArgumentBuilder":
        if name not in self.GROUP_ORDER:
            raise ValueError(f"Unknown flag group: {name}")
        self._groups[name] = FlagGroup(name=name, args=tuple(args))
        return self

    def dump_json(self) -> "ArgumentBuilder":
        """Print a single JSON record instead of downloading."""
        return self._set("json", "--dump-single-json")

    def extract_audio(self, audio_format: str) -> "ArgumentBuilder":
        """Extract the audio stream and convert it to ``audio_format`` at best quality."""
        return self._set(
            "extraction", "-x", "--audio-format", audio_format, "--audio-quality", BEST_AUDIO_QUALITY
        )

    def embed_thumbnail(self) -> "ArgumentBuilder":
        return self._set("artwork", "--embed-thumbnail")

    def embed_metadata(self, parse_rule: str = DESCRIPTION_TO_COMMENT_RULE) -> "ArgumentBuilder":
        return self._set("metadata", "--embed-metadata", "--parse-metadata", parse_rule)

    def output(self, directory: str, template: str = OUTPUT_FILENAME_TEMPLATE) -> "ArgumentBuilder":
        return self._set("output", "-o", os.path.join(directory, template))

    def quiet(self) -> "ArgumentBuilder":
        """Suppress warnings and never expand playlists."""
        return self._set("behaviour", "--no-warnings", "--no-playlist")

    def target(self, url: str) -> "ArgumentBuilder":
        return self._set("target", url)

    @property
    def groups(self) -> List[FlagGroup]:
        """Configured groups in emission order."""
        return [self._groups[name] for name in self.GROUP_ORDER if name in self._groups]

    def build(self) -> List[str]:
        """Flatten the configured groups into a new argument list."""
        if "target" not in self._groups:
            raise ValueError("A target URL is required")
        args: List[str] = []
        for group in self.groups:
            args.extend(group.args)
        return args

    @classmethod
    def for_info(cls, url: str) -> List[str]:
        """Arguments for metadata-only JSON mode."""
        return cls().dump_json().quiet().target(url).build()

    @classmethod
    def for_download(
        cls, request: ExtractionRequest, scratch_dir: str, audio_format: Optional[str] = None
    ) -> List[str]:
        """
        Arguments for fetching, converting and tagging audio into ``scratch_dir``.

        Original-quality requests always use opus; convert requests use the
        requested format. The thumbnail is embedded only when the output
        container can hold it, since yt-dlp fails otherwise.
        """
        fmt = audio_format or request.audio_format
        builder = cls().extract_audio(fmt)
        if supports_thumbnail(fmt):
            builder.embed_thumbnail()
        return builder.embed_metadata().output(scratch_dir).quiet().target(request.url).build()
