import click

from polystore.boot import init_polystore
from polystore.clients import Clients
from polystore.core import StorageController
from polystore.exc import PolystoreError
from polystore.urls import is_directory


def _echo_callback(message, label):
    click.echo(message if label is None else f"[{label}] {message}")


@click.group
@click.pass_context
def main(ctx):
    ctx.obj = {
        "clients": Clients.from_config(),
        "controller": StorageController(),
    }


@main.command
@click.argument("url")
@click.pass_obj
def exists(obj, url):
    click.echo("yes" if obj["controller"].exists(url, obj["clients"]) else "no")


@main.command
@click.argument("url")
@click.option("--fail-if-exists", is_flag=True, default=False)
@click.pass_obj
def mkdir(obj, url, fail_if_exists):
    obj["controller"].create_directory(url, obj["clients"], fail_if_exists, callback=_echo_callback)


@main.command
@click.argument("url")
@click.option("--no-overwrite", is_flag=True, default=False)
@click.pass_obj
def touch(obj, url, no_overwrite):
    obj["controller"].create_file(url, obj["clients"], not no_overwrite, callback=_echo_callback).close(False)


@main.command
@click.argument("url")
@click.option("--no-recurse", is_flag=True, default=False)
@click.option("--keep-going", is_flag=True, default=False)
@click.pass_obj
def rm(obj, url, no_recurse, keep_going):
    success = obj["controller"].delete(
        url,
        obj["clients"],
        recurse=not no_recurse,
        stop_on_error=not keep_going,
        callback=_echo_callback
    )
    if not success:
        raise click.ClickException(f"Could not completely delete [{url}]")


@main.command
@click.argument("url")
@click.pass_obj
def ls(obj, url):
    directory = obj["controller"].get_directory(url, obj["clients"])
    for sub_dir in directory.get_directories():
        click.echo(sub_dir.full_name)
    for sub_file in directory.get_files():
        click.echo(sub_file.full_name)


@main.command
@click.argument("url")
@click.option("--encoding", default="utf-8")
@click.pass_obj
def cat(obj, url, encoding):
    click.echo(obj["controller"].get_file(url, obj["clients"]).read_all_text(encoding), nl=False)


@main.command
@click.argument("url")
@click.argument("text")
@click.option("--encoding", default="utf-8")
@click.pass_obj
def write(obj, url, text, encoding):
    obj["controller"].get_file(url, obj["clients"]).write_all_text(text, encoding, callback=_echo_callback)


@main.command
@click.argument("source")
@click.argument("target")
@click.option("--no-overwrite", is_flag=True, default=False)
@click.pass_obj
def cp(obj, source, target, no_overwrite):
    controller = obj["controller"]
    if is_directory(source):
        src = controller.get_directory(source, obj["clients"])
        dest = controller.get_directory(target, obj["clients"])
    else:
        src = controller.get_file(source, obj["clients"])
        dest = controller.get_file(target, obj["clients"])
    src.copy_to(dest, not no_overwrite, callback=_echo_callback)


def run():
    init_polystore()
    try:
        main()
    except PolystoreError as ex:
        raise SystemExit(f"{ex.__class__.__name__}: {str(ex)}")
