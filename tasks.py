from invoke import task


@task
def lint(c):
    c.run("ruff check .")


@task
def format_check(c):
    c.run("ruff format --check .")


@task
def test(c):
    c.run("pytest")


@task
def simulate(c, mode="pairwise-judge", teams=8, judges=4):
    c.run(
        "judging-engine simulate --database-url sqlite:///simulation.db "
        f"--mode {mode} --teams {teams} --judges {judges}"
    )


@task
def ci(c):
    lint(c)
    format_check(c)
    test(c)
