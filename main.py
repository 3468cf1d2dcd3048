"""Embed Renderer - Command Line Entry Point"""

import argparse
import json
import logging
import sys
from pathlib import Path

from config import Config
from detection import (
    annotate_source, detect_toggles, detect_variables_with_toggle_context
)
from document_model.errors import MalformedDocumentError, PipelineError
from rendering import calculate_content_hash, render_embed

logger = logging.getLogger(__name__)


def configure_logging():
    # stdout carries command output, so log records go to stderr
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def load_source(path):
    """Read a source file: ``.json`` files hold a document tree, anything else is plain text."""
    file_path = Path(path)
    text = file_path.read_text(encoding='utf-8')
    if file_path.suffix.lower() != '.json':
        return text
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedDocumentError(f"Source {path} is not valid JSON: {e}")


def load_json(path):
    try:
        return json.loads(Path(path).read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise PipelineError(f"{path} is not valid JSON: {e}")


def write_output(result):
    if isinstance(result, str):
        sys.stdout.write(result)
        if not result.endswith('\n'):
            sys.stdout.write('\n')
    else:
        sys.stdout.write(json.dumps(result, indent=2, ensure_ascii=False) + '\n')


def command_render(args):
    source = load_source(args.source)
    config = load_json(args.config) if args.config else {}
    write_output(render_embed(source, config))


def command_detect(args):
    source = load_source(args.source)
    if isinstance(source, str):
        variables = detect_variables_with_toggle_context(source)
        toggles = detect_toggles(source)
    else:
        annotated = annotate_source(source)
        variables, toggles = annotated['variables'], annotated['toggles']
    write_output({
        'variables': [variable.to_dict() for variable in variables],
        'toggles': [toggle.to_dict() for toggle in toggles],
    })


def command_hash(args):
    source = load_source(args.source)
    metadata = load_json(args.metadata) if args.metadata else {}
    write_output(calculate_content_hash(source, metadata))


def build_parser():
    parser = argparse.ArgumentParser(
        description="Render embeds from source documents, detect placeholders and hash sources"
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    render_parser = subparsers.add_parser('render', help='Render a source with an embed configuration')
    render_parser.add_argument('source', help='Source document (.json tree or plain text)')
    render_parser.add_argument('config', nargs='?', help='Render configuration JSON file')
    render_parser.set_defaults(handler=command_render)

    detect_parser = subparsers.add_parser('detect', help='Detect variables and toggles in a source')
    detect_parser.add_argument('source', help='Source document (.json tree or plain text)')
    detect_parser.set_defaults(handler=command_detect)

    hash_parser = subparsers.add_parser('hash', help='Compute the canonical content hash of a source')
    hash_parser.add_argument('source', help='Source document (.json tree or plain text)')
    hash_parser.add_argument('--metadata', help='JSON file with name, category, variables, toggles, documentationLinks')
    hash_parser.set_defaults(handler=command_hash)

    return parser


def main(argv=None):
    configure_logging()
    args = build_parser().parse_args(argv)

    try:
        args.handler(args)
    except PipelineError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except OSError as e:
        logger.error(f"Could not read input: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
