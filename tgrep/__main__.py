from tgrep.cli import app

app(prog_name="tgrep")
