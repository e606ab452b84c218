from recallkit.interface.cli import app

app(prog_name="recallkit")
