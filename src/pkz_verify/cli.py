import json
from pathlib import Path
import click
from .logic import verify_output

@click.group()
def main():
    pass

@main.command("output")
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
def output_cmd(path: Path):
    result = verify_output(path)
    click.echo(json.dumps(result, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    if result["status"] != "PASS":
        raise SystemExit(1)

if __name__ == "__main__":
    main()
