"""Smart ToDo CLI — run the server and a couple of local dev helpers.

Usage:
    smarttodo serve                 # uvicorn with configured host/port
    smarttodo init-db               # create missing tables
    smarttodo token ACCOUNT_ID      # print a bearer credential for an account
"""

import asyncio

import click

from smarttodo.config import Settings


@click.group()
@click.pass_context
def cli(ctx):
    """Smart ToDo API management."""
    ctx.obj = Settings()


@cli.command()
@click.option("--host", default=None, help="Bind address (default: settings)")
@click.option("--port", type=int, default=None, help="Port (default: settings)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
@click.pass_obj
def serve(settings: Settings, host, port, reload):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "smarttodo.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command("init-db")
def init_db():
    """Create any missing database tables."""
    from smarttodo.db.engine import engine, init_models

    async def _init():
        try:
            await init_models(engine)
        finally:
            await engine.dispose()

    asyncio.run(_init())
    click.echo("Tables ready.")


@cli.command()
@click.argument("account_id")
@click.option("--expire", default=None, help='Override lifetime, e.g. "15m"')
@click.pass_obj
def token(settings: Settings, account_id, expire):
    """Print a credential for ACCOUNT_ID signed with the configured key."""
    from smarttodo.auth.jwt import CredentialKey, TokenIssuer
    from smarttodo.config import parse_duration

    try:
        lifetime = parse_duration(expire) if expire else settings.token_lifetime
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--expire")

    key = CredentialKey(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        lifetime=lifetime,
    )
    credential = TokenIssuer(key).issue(account_id)
    click.echo(credential.token)
    click.echo(f"expires: {credential.claims.expires_at.isoformat()}", err=True)


def main():
    cli()


if __name__ == "__main__":
    main()
