from typer.testing import CliRunner
from cmsfix.cli.cli import app

def test_cli_smoke():
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "cleanup-drafts" in result.output
    assert "strip-header" in result.output
