"""Tests for yt-dlp argument construction"""

import os

import pytest

from ytaudio.extractor.arguments import (
    DESCRIPTION_TO_COMMENT_RULE,
    ArgumentBuilder,
    FlagGroup,
)
from ytaudio.models.audio import ExtractionRequest

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
SCRATCH = "/tmp/yt-audio-downloads/abc123"


class TestInfoArguments:
    """Metadata-only JSON mode"""

    def test_info_arguments(self) -> None:
        assert ArgumentBuilder.for_info(URL) == [
            "--dump-single-json",
            "--no-warnings",
            "--no-playlist",
            URL,
        ]

    def test_url_is_a_single_argument(self) -> None:
        url = "https://youtu.be/abc; rm -rf / && echo $HOME"
        args = ArgumentBuilder.for_info(url)
        assert args[-1] == url
        assert args.count(url) == 1


class TestDownloadArguments:
    """Download mode flag groups"""

    def test_convert_to_mp3(self) -> None:
        request = ExtractionRequest(url=URL, desired_format="mp3")
        assert ArgumentBuilder.for_download(request, SCRATCH) == [
            "-x",
            "--audio-format",
            "mp3",
            "--audio-quality",
            "0",
            "--embed-thumbnail",
            "--embed-metadata",
            "--parse-metadata",
            DESCRIPTION_TO_COMMENT_RULE,
            "-o",
            os.path.join(SCRATCH, "%(title)s.%(ext)s"),
            "--no-warnings",
            "--no-playlist",
            URL,
        ]

    def test_default_format_is_mp3(self) -> None:
        args = ArgumentBuilder.for_download(ExtractionRequest(url=URL), SCRATCH)
        assert args[args.index("--audio-format") + 1] == "mp3"

    def test_original_mode_uses_opus_with_thumbnail(self) -> None:
        request = ExtractionRequest(url=URL, desired_format="wav", use_original=True)
        args = ArgumentBuilder.for_download(request, SCRATCH)
        assert args[:5] == ["-x", "--audio-format", "opus", "--audio-quality", "0"]
        assert "--embed-thumbnail" in args

    @pytest.mark.parametrize("fmt", ["wav", "aac", "alac", "vorbis", "best"])
    def test_no_thumbnail_for_incapable_formats(self, fmt: str) -> None:
        args = ArgumentBuilder.for_download(ExtractionRequest(url=URL, desired_format=fmt), SCRATCH)
        assert "--embed-thumbnail" not in args
        assert args[args.index("--audio-format") + 1] == fmt

    @pytest.mark.parametrize("fmt", ["mp3", "m4a", "flac", "opus"])
    def test_thumbnail_for_capable_formats(self, fmt: str) -> None:
        args = ArgumentBuilder.for_download(ExtractionRequest(url=URL, desired_format=fmt), SCRATCH)
        assert "--embed-thumbnail" in args

    def test_explicit_format_overrides_request(self) -> None:
        request = ExtractionRequest(url=URL, desired_format="mp3")
        args = ArgumentBuilder.for_download(request, SCRATCH, audio_format="wav")
        assert args[args.index("--audio-format") + 1] == "wav"

    def test_description_rule_is_one_argument(self) -> None:
        args = ArgumentBuilder.for_download(ExtractionRequest(url=URL), SCRATCH)
        assert args[args.index("--parse-metadata") + 1] == DESCRIPTION_TO_COMMENT_RULE

    def test_each_call_returns_a_new_list(self) -> None:
        request = ExtractionRequest(url=URL)
        first = ArgumentBuilder.for_download(request, SCRATCH)
        first.append("--mutated")
        assert "--mutated" not in ArgumentBuilder.for_download(request, SCRATCH)


class TestArgumentBuilder:
    """Builder mechanics"""

    def test_groups_follow_fixed_order_regardless_of_call_order(self) -> None:
        builder = (
            ArgumentBuilder()
            .target(URL)
            .quiet()
            .output(SCRATCH)
            .embed_metadata()
            .extract_audio("flac")
            .embed_thumbnail()
        )
        assert [g.name for g in builder.groups] == [
            "extraction",
            "artwork",
            "metadata",
            "output",
            "behaviour",
            "target",
        ]
        assert builder.build()[-1] == URL

    def test_setting_a_group_twice_replaces_it(self) -> None:
        builder = ArgumentBuilder().extract_audio("mp3").extract_audio("wav").target(URL)
        assert builder.groups[0] == FlagGroup(
            name="extraction", args=("-x", "--audio-format", "wav", "--audio-quality", "0")
        )

    def test_target_is_required(self) -> None:
        with pytest.raises(ValueError, match="target"):
            ArgumentBuilder().quiet().build()

    def test_unknown_group_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown flag group"):
            ArgumentBuilder()._set("cookies", "--cookies", "x")
