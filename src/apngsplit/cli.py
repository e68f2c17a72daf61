import logging
import pathlib

import typer

from apngsplit.apng import anim
from apngsplit.apng.preset import ParseOptions
from apngsplit.errors import APNGError
from apngsplit.kernel.fileio import ResourceFile, write_file
from apngsplit.kernel.preset import png

app = typer.Typer()


@app.callback()
def main(
    verbose: bool = typer.Option(False, '--verbose', '-v', help='debug logging'),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s: %(message)s',
    )


def fail(exc: APNGError) -> typer.Exit:
    typer.echo(f'error: {exc}', err=True)
    return typer.Exit(code=1)


@app.command()
def split(
    filename: pathlib.Path = typer.Argument(
        ..., exists=True, dir_okay=False, help='APNG file to split'
    ),
    output: pathlib.Path = typer.Option(
        pathlib.Path('.'), '--output', '-o', help='directory for frame files'
    ),
    ignore_single: bool = typer.Option(False, help='only accept animations'),
    force_loop: bool = typer.Option(False, help='loop forever'),
    decode: bool = typer.Option(False, help='decode and re-save every frame'),
) -> None:
    options = ParseOptions(ignore_single=ignore_single, force_loop=force_loop)
    try:
        with ResourceFile.load(filename) as res:
            if decode:
                images = [frame.image for frame in anim.parse(res, options).frames]
            else:
                streams = anim.split(res, options)
    except APNGError as exc:
        raise fail(exc) from exc

    output.mkdir(parents=True, exist_ok=True)
    if decode:
        for idx, im in enumerate(images):
            im.save(output / f'{filename.stem}_{idx:04d}.png')
        count = len(images)
    else:
        for idx, stream in enumerate(streams):
            write_file(output / f'{filename.stem}_{idx:04d}.png', stream)
        count = len(streams)
    typer.echo(f'{filename}: wrote {count} frames to {output}')


@app.command()
def info(
    filename: pathlib.Path = typer.Argument(
        ..., exists=True, dir_okay=False, help='APNG file to inspect'
    ),
    ignore_single: bool = typer.Option(False, help='only accept animations'),
    force_loop: bool = typer.Option(False, help='loop forever'),
) -> None:
    options = ParseOptions(ignore_single=ignore_single, force_loop=force_loop)
    try:
        with ResourceFile.load(filename) as res:
            extracted = anim.extract(res, options)
    except APNGError as exc:
        raise fail(exc) from exc

    typer.echo(
        f'{filename}: {extracted.width}x{extracted.height}, '
        f'{len(extracted.frames)} frames, plays={extracted.num_plays}, '
        f'time={extracted.play_time:g}ms'
    )
    for idx, frame in enumerate(extracted.frames):
        ctl = frame.control
        typer.echo(
            f'FRAME {idx} - {ctl.width}x{ctl.height}+{ctl.left}+{ctl.top} '
            f'delay={ctl.delay:g}ms dispose={ctl.dispose_op} blend={ctl.blend_op} '
            f'parts={len(frame.data_parts)}'
        )


@app.command()
def chunks(
    filename: pathlib.Path = typer.Argument(
        ..., exists=True, dir_okay=False, help='PNG file to list'
    ),
    tag: str = typer.Option('{}', help='tag pattern, e.g. "{}TL"'),
) -> None:
    try:
        with ResourceFile.load(filename) as res:
            listing = png.renders(png.findall(tag, png.read_chunks(res)))
    except APNGError as exc:
        raise fail(exc) from exc
    typer.echo(listing, nl=False)


if __name__ == '__main__':
    app()
