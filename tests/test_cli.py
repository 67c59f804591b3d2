import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def _run(args, input=None):
    return subprocess.run(
        [sys.executable, "pycpp.py", *args],
        cwd=ROOT,
        input=input,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )


def test_expand_file_to_stdout(tmp_path: Path):
    src = tmp_path / "t.c"
    src.write_text("#define SQ(x) ((x) * (x))\nint a = SQ(3);\n")
    res = _run([str(src)])
    assert res.returncode == 0, res.stderr
    assert res.stdout == "int a = ((3) * (3));\n"


def test_output_file(tmp_path: Path):
    src = tmp_path / "t.c"
    src.write_text("#define N 4\nint a[N];\n")
    out = tmp_path / "t.i"
    res = _run([str(src), "-o", str(out)])
    assert res.returncode == 0, res.stderr
    assert res.stdout == ""
    assert out.read_text() == "int a[4];\n"


def test_stdin():
    res = _run(["-"], input="#define X 1\nX X\n")
    assert res.returncode == 0, res.stderr
    assert res.stdout == "1 1\n"

    res = _run([], input="#define Y 2\nY\n")
    assert res.returncode == 0, res.stderr
    assert res.stdout == "2\n"


def test_define_and_undefine(tmp_path: Path):
    src = tmp_path / "t.c"
    src.write_text("FOO BAR\n")

    res = _run(["-DFOO=3", "-D", "BAR", str(src)])
    assert res.returncode == 0, res.stderr
    assert res.stdout == "3 1\n"

    res = _run(["-DFOO=3", "-UFOO", str(src)])
    assert res.returncode == 0, res.stderr
    assert res.stdout == "FOO BAR\n"


def test_dump_macros(tmp_path: Path):
    src = tmp_path / "t.c"
    src.write_text("#define B 2\n#define A(x, ...) x\n#define C\n#undef C\nB\n")
    res = _run(["-dM", str(src)])
    assert res.returncode == 0, res.stderr
    assert res.stdout == "#define A(x, ...) x\n#define B 2\n"


def test_error_exit_code(tmp_path: Path):
    src = tmp_path / "bad.c"
    src.write_text("#define F(a, a) a\n")
    res = _run([str(src)])
    assert res.returncode == 1
    assert res.stdout == ""
    assert "Error: duplicate macro parameter 'a' at 1:" in res.stderr


def test_missing_file(tmp_path: Path):
    res = _run([str(tmp_path / "nope.c")])
    assert res.returncode == 1
    assert "Error: cannot read" in res.stderr


def test_invalid_define_option():
    res = _run(["-D1X"], input="x\n")
    assert res.returncode == 1
    assert "invalid macro option" in res.stderr


def test_warnings_go_to_stderr():
    res = _run([], input="#define X 1\n#define X 2\nX\n")
    assert res.returncode == 0
    assert res.stdout == "2\n"
    assert "Warning: 'X' redefined at 2:1" in res.stderr


def test_verbose_logs_expansions():
    res = _run(["-v"], input="#define X 1\nX\n")
    assert res.returncode == 0, res.stderr
    assert res.stdout == "1\n"
    assert "pycpp.expander" in res.stderr
    assert "pycpp.preprocessor" in res.stderr


def test_deep_nesting_exit_code():
    src = "#define f(x) (x)\n" + "f(" * 400 + "1" + ")" * 400 + "\n"
    res = _run([], input=src)
    assert res.returncode == 1
    assert "Traceback" not in res.stderr
    assert "Error: macro nesting too deep" in res.stderr
