"""
Command-line interface for pdfium-cli.
"""

import logging
import os
import sys

import click
from rich.console import Console
from rich.markup import escape

from pdfium_cli import __version__
from pdfium_cli.context import RunContext
from pdfium_cli.document import DocumentSource
from pdfium_cli.exceptions import (
    ExitCode,
    InvalidInputError,
    InvalidOutputError,
    PageRangeError,
    PdfiumCliError,
)
from pdfium_cli.exporter import DEFAULT_DPI, PageExporter, export_attachments, export_javascripts
from pdfium_cli.imaging import DEFAULT_JPEG_QUALITY, FILE_TYPES, MAX_FILE_SIZE
from pdfium_cli.inspector import (
    JSON_DETAILS,
    OUTPUT_TYPES,
    build_form,
    build_info,
    build_text,
    render_form_text,
    render_info_text,
    render_text,
    to_json,
)
from pdfium_cli.merger import merge_documents
from pdfium_cli.page_range import DEFAULT_PAGE_RANGE, resolve_page_range
from pdfium_cli.streams import DEFAULT_DELIMITER
from pdfium_cli.types import PixelPositions
from pdfium_cli.utils import configure_logging, is_std_stream, write_file

LOGGER = logging.getLogger(__name__)

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

PAGES_HELP = (
    "Ranges are like '1-3,5', which will result in pages 1, 2, 3 and 5. "
    "You can use the keywords first and last. You can prepend a page number "
    "with r to count from the end: '2-last' is the second page until the last "
    "page, '3-r1' is page 3 until the second-last page."
)


class ExitCodeGroup(click.Group):
    """Group that turns errors into the documented process exit codes."""

    def main(self, *args, standalone_mode=True, **kwargs):
        if not standalone_mode:
            return super().main(*args, standalone_mode=False, **kwargs)

        try:
            rv = super().main(*args, standalone_mode=False, **kwargs)
        except click.UsageError as e:
            e.show()
            sys.exit(ExitCode.INVALID_ARGUMENTS)
        except click.ClickException as e:
            e.show()
            sys.exit(e.exit_code)
        except click.Abort:
            err_console.print("Aborted!")
            sys.exit(1)
        except PdfiumCliError as e:
            err_console.print(f"[bold red]✗ Error:[/bold red] {escape(str(e))}")
            sys.exit(int(e.exit_code))
        except Exception as e:
            LOGGER.debug("Unhandled error", exc_info=True)
            err_console.print(f"[bold red]✗ Error:[/bold red] {escape(type(e).__name__)}: {escape(str(e))}")
            sys.exit(int(ExitCode.PDFIUM_ERROR))
        sys.exit(rv if isinstance(rv, int) else 0)


# ----------------------------------------------------------------------
# Shared options
# ----------------------------------------------------------------------
def generic_pdf_options(func):
    func = click.option(
        '--std-file-delimiter',
        default=DEFAULT_DELIMITER,
        show_default=True,
        help='The delimiter to use when having multiple files in your input and/or output.',
    )(func)
    func = click.option(
        '--password', '-p',
        default=None,
        help='Password on the input PDF file(s).',
    )(func)
    return func


def pages_options(func):
    func = click.option(
        '--ignore-invalid-pages',
        is_flag=True,
        default=False,
        help='Skip pages that do not exist instead of failing.',
    )(func)
    func = click.option(
        '--pages',
        default=DEFAULT_PAGE_RANGE,
        show_default=True,
        help=f'The pages or page ranges to use. {PAGES_HELP}',
    )(func)
    return func


def image_options(func):
    func = click.option(
        '--jpeg-quality',
        default=DEFAULT_JPEG_QUALITY,
        show_default=True,
        type=click.IntRange(1, 100),
        help='Quality to use when file type is jpeg.',
    )(func)
    func = click.option(
        '--file-type',
        default='jpeg',
        show_default=True,
        type=click.Choice(FILE_TYPES),
        help='The file type to write images in.',
    )(func)
    return func


def output_type_option(func):
    return click.option(
        '--output-type',
        default='text',
        show_default=True,
        type=click.Choice(OUTPUT_TYPES),
        help='The format of the output.',
    )(func)


def _validate_input(ctx, param, value):
    values = value if isinstance(value, tuple) else (value,)
    for item in values:
        if not is_std_stream(item) and not os.path.isfile(item):
            raise InvalidInputError(f"could not open input file {item}: no such file")
    return value


def _validate_output_folder(ctx, param, value):
    if not is_std_stream(value) and not os.path.isdir(value):
        raise InvalidOutputError(f"output folder {value} does not exist or is not a directory")
    return value


def _run_context(password, delimiter):
    ctx = click.get_current_context()
    return ctx.with_resource(
        RunContext(
            password=password or None,
            delimiter=delimiter,
        )
    )


def _status(message):
    console.print(escape(message))


def _resolve_pages(document, expression, tolerant):
    try:
        return resolve_page_range(document.page_count, expression, tolerant=tolerant)
    except PageRangeError as e:
        raise PageRangeError(f"invalid page range '{expression}': {e}") from e


def _write_report(report, output):
    if output is None or is_std_stream(output):
        click.echo(report, nl=False)
        return
    destination = write_file(output, report.encode('utf-8'))
    _status(f"Written report into {destination}")


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------
@click.group(cls=ExitCodeGroup, context_settings={'auto_envvar_prefix': 'PDFIUM_CLI'})
@click.version_option(version=__version__)
@click.option('--verbose', '-v', count=True, help='Log to stderr, repeat for debug output.')
def cli(verbose):
    """
    pdfium-cli - Render, split, merge and inspect PDF files with PDFium.

    Every [input] can be a file path or - for the next document on stdin.
    Several documents on stdin, and several results on stdout, are
    separated by a newline, the delimiter and a newline.
    """
    configure_logging(verbose)


@cli.command(name="render")
@click.argument('input_pdf', callback=_validate_input)
@click.argument('output')
@generic_pdf_options
@pages_options
@image_options
@click.option('--dpi', default=DEFAULT_DPI, show_default=True, type=click.IntRange(1, 2400),
              help='The DPI to render the pages in.')
@click.option('--max-file-size', default=MAX_FILE_SIZE, show_default=True, type=click.IntRange(0),
              help='Maximum size in bytes of a jpeg image, quality is lowered to fit. 0 disables the limit.')
def render(input_pdf, output, password, std_file_delimiter, pages, ignore_invalid_pages,
           file_type, jpeg_quality, dpi, max_file_size):
    """
    Render a PDF into images.

    The output filename should contain a "%d" placeholder for the page
    number, e.g. render invoice.pdf invoice-%d.jpg gives invoice-1.jpg and
    invoice-2.jpg for a 2-page PDF.
    """
    run = _run_context(password, std_file_delimiter)
    with DocumentSource(run).open(input_pdf) as document:
        selected = _resolve_pages(document, pages, ignore_invalid_pages)
        PageExporter(run, document, selected, status_callback=_status).render(
            output,
            dpi=dpi,
            file_type=file_type,
            quality=jpeg_quality,
            max_file_size=max_file_size or None,
        )


@cli.command(name="explode")
@click.argument('input_pdf', callback=_validate_input)
@click.argument('output')
@generic_pdf_options
@pages_options
def explode(input_pdf, output, password, std_file_delimiter, pages, ignore_invalid_pages):
    """
    Explode a PDF into one PDF per page.

    The output filename should contain a "%d" placeholder for the page
    number, e.g. explode invoice.pdf invoice-%d.pdf. With - as output the
    PDFs are written to stdout, separated by the delimiter.
    """
    run = _run_context(password, std_file_delimiter)
    with DocumentSource(run).open(input_pdf) as document:
        selected = _resolve_pages(document, pages, ignore_invalid_pages)
        PageExporter(run, document, selected, status_callback=_status).explode(output)


@cli.command(name="merge")
@click.argument('paths', nargs=-1, required=True)
@generic_pdf_options
def merge(paths, password, std_file_delimiter):
    """
    Merge multiple PDFs into a single PDF.

    Usage: merge [input] [input] ([input]...) [output]
    """
    if len(paths) < 3:
        raise click.UsageError("merge needs at least two inputs and an output")
    inputs, output = paths[:-1], paths[-1]
    _validate_input(None, None, inputs)

    run = _run_context(password, std_file_delimiter)
    merge_documents(run, inputs, output, status_callback=_status)


@cli.command(name="flatten")
@click.argument('input_pdf', callback=_validate_input)
@click.argument('output')
@generic_pdf_options
@pages_options
def flatten(input_pdf, output, password, std_file_delimiter, pages, ignore_invalid_pages):
    """
    Flatten annotations and form fields into the page content.
    """
    run = _run_context(password, std_file_delimiter)
    with DocumentSource(run).open(input_pdf) as document:
        selected = _resolve_pages(document, pages, ignore_invalid_pages)
        PageExporter(run, document, selected, status_callback=_status).flatten(output)


@cli.command(name="images")
@click.argument('input_pdf', callback=_validate_input)
@click.argument('output_folder', callback=_validate_output_folder)
@generic_pdf_options
@pages_options
@image_options
def images(input_pdf, output_folder, password, std_file_delimiter, pages, ignore_invalid_pages,
           file_type, jpeg_quality):
    """
    Extract the images of a PDF.
    """
    run = _run_context(password, std_file_delimiter)
    with DocumentSource(run).open(input_pdf) as document:
        selected = _resolve_pages(document, pages, ignore_invalid_pages)
        PageExporter(run, document, selected, status_callback=_status).images(
            output_folder, file_type=file_type, quality=jpeg_quality
        )


@cli.command(name="thumbnails")
@click.argument('input_pdf', callback=_validate_input)
@click.argument('output_folder', callback=_validate_output_folder)
@generic_pdf_options
@pages_options
@image_options
def thumbnails(input_pdf, output_folder, password, std_file_delimiter, pages, ignore_invalid_pages,
               file_type, jpeg_quality):
    """
    Extract the embedded page thumbnails of a PDF.
    """
    run = _run_context(password, std_file_delimiter)
    with DocumentSource(run).open(input_pdf) as document:
        selected = _resolve_pages(document, pages, ignore_invalid_pages)
        PageExporter(run, document, selected, status_callback=_status).thumbnails(
            output_folder, file_type=file_type, quality=jpeg_quality
        )


@cli.command(name="text")
@click.argument('input_pdf', callback=_validate_input)
@click.argument('output', required=False)
@generic_pdf_options
@pages_options
@output_type_option
@click.option('--text-page-header/--no-text-page-header', default=True, show_default=True,
              help='Whether to add page headers to indicate the page number.')
@click.option('--json-output-details', default='compact', show_default=True, type=click.Choice(JSON_DETAILS),
              help='compact gives the text per page, full gives coordinates per character and rectangle.')
@click.option('--json-full-collect-font-information', is_flag=True, default=False,
              help='Collect font information, only with --json-output-details full.')
@click.option('--json-full-pixel-positions-dpi', default=0, type=click.IntRange(0),
              help='DPI you used when rendering, to calculate pixel positions.')
@click.option('--json-full-pixel-positions-width', default=0, type=click.IntRange(0),
              help='Width you used when rendering, to calculate pixel positions.')
@click.option('--json-full-pixel-positions-height', default=0, type=click.IntRange(0),
              help='Height you used when rendering, to calculate pixel positions.')
def text(input_pdf, output, password, std_file_delimiter, pages, ignore_invalid_pages, output_type,
         text_page_header, json_output_details, json_full_collect_font_information,
         json_full_pixel_positions_dpi, json_full_pixel_positions_width, json_full_pixel_positions_height):
    """
    Get the text of a PDF in text or json.
    """
    run = _run_context(password, std_file_delimiter)
    with DocumentSource(run).open(input_pdf) as document:
        selected = _resolve_pages(document, pages, ignore_invalid_pages)
        details = json_output_details if output_type == 'json' else 'compact'
        report = build_text(
            document,
            selected,
            details=details,
            collect_font_information=json_full_collect_font_information,
            pixel_positions=PixelPositions(
                dpi=json_full_pixel_positions_dpi,
                width=json_full_pixel_positions_width,
                height=json_full_pixel_positions_height,
            ),
        )

    if output_type == 'json':
        _write_report(to_json(report) + "\n", output)
    else:
        _write_report(render_text(report, page_header=text_page_header), output)


@cli.command(name="form")
@click.argument('input_pdf', callback=_validate_input)
@click.argument('output', required=False)
@generic_pdf_options
@output_type_option
def form(input_pdf, output, password, std_file_delimiter, output_type):
    """
    Get the form fields of a PDF.
    """
    run = _run_context(password, std_file_delimiter)
    with DocumentSource(run).open(input_pdf) as document:
        fields = build_form(document)

    if output_type == 'json':
        _write_report(to_json(fields) + "\n", output)
    else:
        _write_report(render_form_text(fields), output)


@cli.command(name="info")
@click.argument('input_pdf', callback=_validate_input)
@click.argument('output', required=False)
@generic_pdf_options
@output_type_option
def info(input_pdf, output, password, std_file_delimiter, output_type):
    """
    Get information about a PDF: version, metadata, pages, permissions and more.
    """
    run = _run_context(password, std_file_delimiter)
    with DocumentSource(run).open(input_pdf) as document:
        report = build_info(document)

    if output_type == 'json':
        _write_report(to_json(report) + "\n", output)
    else:
        _write_report(render_info_text(report), output)


@cli.command(name="attachments")
@click.argument('input_pdf', callback=_validate_input)
@click.argument('output_folder', callback=_validate_output_folder)
@generic_pdf_options
def attachments(input_pdf, output_folder, password, std_file_delimiter):
    """
    Extract the attachments of a PDF.
    """
    run = _run_context(password, std_file_delimiter)
    with DocumentSource(run).open(input_pdf) as document:
        export_attachments(run, document, output_folder, status_callback=_status)


@cli.command(name="javascripts")
@click.argument('input_pdf', callback=_validate_input)
@click.argument('output_folder', callback=_validate_output_folder)
@generic_pdf_options
def javascripts(input_pdf, output_folder, password, std_file_delimiter):
    """
    Extract the document-level JavaScript actions of a PDF.
    """
    run = _run_context(password, std_file_delimiter)
    with DocumentSource(run).open(input_pdf) as document:
        export_javascripts(run, document, output_folder, status_callback=_status)


def main():
    cli(prog_name="pdfium-cli")


if __name__ == '__main__':
    main()
