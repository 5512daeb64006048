"""Tests for the barsgen command line."""

import json
import shlex
from pathlib import Path
from unittest.mock import patch

import pytest

from barsgen.cli import build_parser, main
from barsgen.ffutil import FFmpegNotFoundError


def _run_main(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


def _filter_complex(cmd: list[str]) -> str:
    return cmd[cmd.index("-filter_complex") + 1]


@pytest.fixture
def mock_ffmpeg():
    """Stub out the ffmpeg lookup and process; yields the ``run`` mock."""
    with patch("barsgen.engine.ffutil.check_ffmpeg"), \
            patch("barsgen.engine.ffutil.run", return_value=0) as mock_run:
        yield mock_run


class TestUsage:
    def test_missing_positionals(self, capsys, mock_ffmpeg):
        assert _run_main([]) == 1
        err = capsys.readouterr().err
        assert "usage: barsgen" in err
        assert "FORMAT, TARGET" in err
        mock_ffmpeg.assert_not_called()

    def test_missing_target(self, capsys, mock_ffmpeg):
        assert _run_main(["mp4"]) == 1
        assert "usage:" in capsys.readouterr().err

    def test_unknown_flag_exits_one(self, capsys):
        assert _run_main(["--bogus", "mp4", "out.mp4"]) == 1
        assert "usage:" in capsys.readouterr().err

    def test_help_is_long_form_only(self, capsys):
        assert _run_main(["--help"]) == 0
        out = capsys.readouterr().out
        assert "--header" in out
        assert "-profiles" in out

    def test_short_h_is_header(self):
        args = build_parser().parse_args(["-h", "Studio B", "mp4", "out.mp4"])
        assert args.header == "Studio B"


class TestLogo:
    def test_missing_logo(self, capsys, tmp_path: Path, mock_ffmpeg):
        missing = tmp_path / "missing-logo.png"
        assert _run_main(["-l", str(missing), "mp4", "out.mp4"]) == 1
        err = capsys.readouterr().err
        assert str(missing) in err
        mock_ffmpeg.assert_not_called()

    def test_existing_logo(self, logo_path: Path, mock_ffmpeg):
        assert _run_main(["--logo", str(logo_path), "mp4", "out.mp4"]) == 0
        cmd = mock_ffmpeg.call_args[0][0]
        assert cmd[cmd.index("-i") + 1] == str(logo_path)

    def test_logo_is_first_input(self, logo_path: Path, mock_ffmpeg):
        assert _run_main(["-l", str(logo_path), "mp4", "out.mp4"]) == 0
        cmd = mock_ffmpeg.call_args[0][0]
        assert cmd.count("-i") == 1
        fc = _filter_complex(cmd)
        assert "[0:v]scale=" in fc
        assert "[1:v]" not in fc


class TestFramerate:
    def test_integer_framerate_non_drop_frame(self, mock_ffmpeg):
        assert _run_main(["-f", "25", "mp4", "out.mp4"]) == 0
        fc = _filter_complex(mock_ffmpeg.call_args[0][0])
        assert r"timecode=00\\:00\\:00\\:00:rate=25" in fc

    def test_fractional_framerate_keeps_drop_frame(self, mock_ffmpeg):
        assert _run_main(["--framerate", "29.97", "mp4", "out.mp4"]) == 0
        fc = _filter_complex(mock_ffmpeg.call_args[0][0])
        assert r"timecode=00\\:00\\:00\;00:rate=29.97" in fc

    def test_default_framerate(self, mock_ffmpeg):
        assert _run_main(["mp4", "out.mp4"]) == 0
        fc = _filter_complex(mock_ffmpeg.call_args[0][0])
        assert r"00\\:00\\:00\;00:rate=30000/1001" in fc

    def test_invalid_framerate(self, capsys, mock_ffmpeg):
        assert _run_main(["-f", "fast", "mp4", "out.mp4"]) == 1
        assert "Invalid framerate" in capsys.readouterr().err


class TestHeader:
    @patch("barsgen.config.socket.gethostname", return_value="studio-7.example.com")
    def test_default_header_is_short_hostname(self, mock_hostname, mock_ffmpeg):
        assert _run_main(["mp4", "out.mp4"]) == 0
        fc = _filter_complex(mock_ffmpeg.call_args[0][0])
        assert "text=studio-7:" in fc
        assert "example.com" not in fc

    def test_header_flag(self, mock_ffmpeg):
        assert _run_main(["-h", "Control Room", "mp4", "out.mp4"]) == 0
        fc = _filter_complex(mock_ffmpeg.call_args[0][0])
        assert "text=Control Room:" in fc


class TestProfiles:
    @patch("barsgen.ffutil.subprocess.Popen")
    def test_list_profiles(self, mock_popen, capsys):
        assert _run_main(["-profiles"]) == 0
        out = capsys.readouterr().out
        assert "Available encoding profiles:" in out
        assert "h264" in out
        mock_popen.assert_not_called()

    @patch("barsgen.cli.profiles.main", return_value=0)
    def test_delegates_to_helper(self, mock_helper, mock_ffmpeg):
        assert _run_main(["-profiles", "mp4", "out.mp4"]) == 0
        mock_helper.assert_called_once()
        mock_ffmpeg.assert_not_called()

    def test_profile_flag(self, mock_ffmpeg):
        assert _run_main(["-p", "prores", "mov", "out.mov"]) == 0
        assert "prores_ks" in mock_ffmpeg.call_args[0][0]

    def test_unknown_profile(self, capsys, mock_ffmpeg):
        assert _run_main(["--profile", "betamax", "mp4", "out.mp4"]) == 1
        assert "Unknown profile 'betamax'" in capsys.readouterr().err
        mock_ffmpeg.assert_not_called()


class TestRun:
    def test_exit_code_from_ffmpeg(self, mock_ffmpeg):
        mock_ffmpeg.return_value = 69
        assert _run_main(["mpegts", "udp://127.0.0.1:1234"]) == 69

    def test_signal_exit_status(self, mock_ffmpeg):
        # SIGTERM
        mock_ffmpeg.return_value = -15
        assert _run_main(["mp4", "out.mp4"]) == 143

    def test_output_and_duration(self, mock_ffmpeg):
        assert _run_main(["-d", "10", "mpegts", "udp://127.0.0.1:1234"]) == 0
        cmd = mock_ffmpeg.call_args[0][0]
        assert cmd[cmd.index("-t") + 1] == "10"
        assert cmd[-3:] == ["-f", "mpegts", "udp://127.0.0.1:1234"]

    @patch("barsgen.engine.ffutil.check_ffmpeg", side_effect=FFmpegNotFoundError("ffmpeg not found on PATH"))
    def test_ffmpeg_missing(self, mock_check, capsys):
        assert _run_main(["mp4", "out.mp4"]) == 1
        assert "ffmpeg not found" in capsys.readouterr().err

    def test_verbose_prints_command(self, capsys, mock_ffmpeg):
        assert _run_main(["-v", "mp4", "out.mp4"]) == 0
        err = capsys.readouterr().err
        assert shlex.split(err.strip()) == mock_ffmpeg.call_args[0][0]

    def test_dry_run(self, capsys, mock_ffmpeg):
        assert _run_main(["-n", "-s", "1280x720", "mp4", "out.mp4"]) == 0
        cmd = shlex.split(capsys.readouterr().out.strip())
        assert "smptehdbars=size=1280x720" in _filter_complex(cmd)
        mock_ffmpeg.assert_not_called()

    def test_realtime(self, mock_ffmpeg):
        assert _run_main(["--realtime", "flv", "rtmp://localhost/live/bars"]) == 0
        assert "[video]realtime[vout]" in _filter_complex(mock_ffmpeg.call_args[0][0])


class TestConfigFile:
    def test_config_supplies_outputs(self, sample_config_path: Path, mock_ffmpeg):
        assert _run_main(["-c", str(sample_config_path)]) == 0
        cmd = mock_ffmpeg.call_args[0][0]
        assert cmd[-3:] == ["-f", "mpegts", "udp://239.0.0.1:1234"]
        assert "mpeg2video" in cmd
        assert cmd[cmd.index("-t") + 1] == "30"
        assert "text=Studio A:" in _filter_complex(cmd)

    def test_flags_override_config(self, sample_config_path: Path, mock_ffmpeg):
        argv = ["-c", str(sample_config_path), "-d", "5", "-p", "h264", "mp4", "out.mp4"]
        assert _run_main(argv) == 0
        cmd = mock_ffmpeg.call_args[0][0]
        assert cmd[cmd.index("-t") + 1] == "5"
        assert "libx264" in cmd
        assert cmd[-3:] == ["-f", "mp4", "out.mp4"]

    def test_config_profiles_listed(self, sample_config_path: Path, capsys):
        assert _run_main(["-c", str(sample_config_path), "-profiles"]) == 0
        assert "studio" in capsys.readouterr().out

    def test_missing_config(self, capsys, tmp_path: Path):
        assert _run_main(["-c", str(tmp_path / "none.json"), "mp4", "out.mp4"]) == 1
        assert "cannot load config" in capsys.readouterr().err

    def test_invalid_config(self, capsys, tmp_path: Path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"colour": "red"}')
        assert _run_main(["-c", str(bad), "mp4", "out.mp4"]) == 1
        assert "Unknown config keys" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "body, key",
        [
            ({"size": 1920}, "size"),
            ({"beep_length": "0.1"}, "beep_length"),
            ({"header": ["a"]}, "header"),
            ({"realtime": "yes"}, "realtime"),
        ],
    )
    def test_wrong_value_type(self, capsys, tmp_path: Path, mock_ffmpeg, body, key):
        bad = tmp_path / "types.json"
        bad.write_text(json.dumps(body))
        assert _run_main(["-c", str(bad), "-n", "mp4", "out.mp4"]) == 1
        err = capsys.readouterr().err
        assert "cannot load config" in err
        assert f"'{key}' must be" in err
        mock_ffmpeg.assert_not_called()
