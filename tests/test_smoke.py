import os
import re
import subprocess
import sys

from ossim.__main__ import main


def programs(tmp_path, *bursts):
    paths = []
    for index, burst in enumerate(bursts, start=1):
        path = tmp_path / f"prog{index}.asm"
        path.write_text("".join(f"NOP {i}\n" for i in range(burst)))
        paths.append(str(path))
    return paths


def test_cli_prints_report(tmp_path):
    repo_root = os.path.dirname(os.path.dirname(__file__))
    result = subprocess.run(
        [sys.executable, '-m', 'ossim', *programs(tmp_path, 5, 3),
         '--algorithm', 'RR', '--quantum', '2', '--arrival', '1', '1'],
        capture_output=True,
        text=True,
        cwd=repo_root,
        check=False,
    )
    assert result.returncode == 0, f"Return code {result.returncode}, stderr: {result.stderr}"
    assert "METRICS REPORT (RR q=2, 1 CPU, FIRST_FIT)" in result.stdout
    m = re.search(r"Average Turnaround Time: ([\d.]+)", result.stdout)
    assert m, result.stdout
    assert float(m.group(1)) == 6.5


def test_cli_writes_charts(tmp_path, capsys):
    gantt = tmp_path / "gantt.png"
    memory = tmp_path / "memory.png"
    code = main([*programs(tmp_path, 4, 2, 3), '--cpus', '2', '--seed', '3',
                 '--gantt', str(gantt), '--memory-map', str(memory)])
    assert code == 0
    assert gantt.stat().st_size > 0
    assert memory.stat().st_size > 0
    assert "Average Response Ratio" in capsys.readouterr().out


def test_cli_reports_bad_configuration(tmp_path, capsys):
    code = main([*programs(tmp_path, 2), '--quantum', '0', '--algorithm', 'RR'])
    assert code == 2
    assert "quantum" in capsys.readouterr().err


def test_cli_reads_config_file(tmp_path, capsys):
    config = tmp_path / "config.json"
    config.write_text('{"algorithm": "sjf", "primary_size": 64}')
    code = main([*programs(tmp_path, 5, 2), '--arrival', '1', '1', '--config', str(config)])
    assert code == 0
    assert "METRICS REPORT (SJF, 1 CPU, FIRST_FIT)" in capsys.readouterr().out


def test_cli_rejects_non_numeric_tick_interval(tmp_path, capsys):
    config = tmp_path / "config.json"
    config.write_text('{"tick_interval": "fast"}')
    code = main([*programs(tmp_path, 2), '--config', str(config)])
    assert code == 2
    assert "tick_interval" in capsys.readouterr().err


def test_cli_runs_twice_in_one_process(tmp_path, capsys):
    paths = programs(tmp_path, 3, 2)
    assert main([*paths, '--arrival', '1', '1']) == 0
    first = capsys.readouterr()
    assert main([*paths, '--arrival', '1', '1', '-v']) == 0
    second = capsys.readouterr()
    assert "METRICS REPORT" in first.out and "METRICS REPORT" in second.out
    assert "[LOAD]" in second.err
