from mp2json.cli import app

app(prog_name="mp2json")
