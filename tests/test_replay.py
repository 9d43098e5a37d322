"""Tests for replaying recorded lane summaries through the controller."""

import json

from lanepilot.core.config import Config
from lanepilot.decision.run import iter_recording, replay


def write_recording(path, frames):
    path.write_text("\n".join(json.dumps(frame) for frame in frames) + "\n")
    return path


def test_iter_recording_spaces_untimed_frames(tmp_path):
    path = write_recording(tmp_path / "run.jsonl", [
        {'angle': 3},
        {'angle': 0},
        {'angle': -2, 'timestamp': 1.0},
        {'angle': 1},
    ])
    frames = list(iter_recording(path, frame_interval_ms=50))

    assert [ms for ms, _ in frames] == [50.0, 100.0, 1000.0, 1050.0]
    assert frames[1][1].angle is None


def test_iter_recording_skips_bad_lines(tmp_path, capsys):
    path = tmp_path / "run.jsonl"
    path.write_text('{"angle": 3}\n# comment\n\nnot json\n{"angle": "x"}\n{"angle": 4}\n')

    frames = list(iter_recording(path, frame_interval_ms=10))
    assert [s.angle for _, s in frames] == [3.0, 4.0]
    assert capsys.readouterr().out.count("Skipping line") == 2


def test_replay_brakes_after_receding_zone(tmp_path):
    frames = [{'angle': 5, 'distanceToStoppingZone': d} for d in (150, 90, 60, 95)]
    path = write_recording(tmp_path / "zone.jsonl", frames)

    commands = replay(path, Config(), frame_interval_ms=50)
    wires = [c.to_wire() for c in commands]

    assert wires.count("speed:brake") == 1
    assert wires[-1] == "speed:brake"
    assert "speed:stop" not in wires


def test_replay_stops_when_lane_is_lost(tmp_path):
    frames = [{'angle': 4}] * 3 + [{'angle': 0}] * 40
    path = write_recording(tmp_path / "lost.jsonl", frames)

    commands = replay(path, Config(), frame_interval_ms=50)
    wires = [c.to_wire() for c in commands]

    assert wires.count("speed:stop") == 1
    assert "setwheel:0.0" in wires


def test_replay_of_empty_recording(tmp_path):
    path = tmp_path / "empty.jsonl"
    path.write_text("")
    assert replay(path, Config()) == []


def test_iter_recording_skips_bad_timestamp(tmp_path, capsys):
    path = tmp_path / "run.jsonl"
    path.write_text(
        '{"angle": 5, "timestamp": 1.0}\n'
        '{"angle": 5, "timestamp": "soon"}\n'
        '{"angle": 6, "frame_id": NaN}\n'
        '{"angle": 7}\n'
    )

    frames = list(iter_recording(path, frame_interval_ms=50))
    assert [(ms, s.angle) for ms, s in frames] == [(1000.0, 5.0), (1050.0, 7.0)]
    assert capsys.readouterr().out.count("Skipping line") == 2
