import nox


nox.options.default_venv_backend = "uv"

@nox.session(python="3.13")
def test(session):
    session.install(".[test]")
    session.install("pytest-cov")
    session.run("uv", "pip", "list")
    session.run("pytest", "--durations=50", "tests", *session.posargs)


@nox.session(name="notebook-check")
def notebook_check(session):
    # Run the example notebook as a script to catch import or API breakage
    session.install("-e", ".")
    session.run("python", "docs/marimo_notebooks/pathways_explorer.py")
