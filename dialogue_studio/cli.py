"""CLI interface with subcommand routing."""

import argparse
import json
import logging
import os
import sys

from dialogue_studio.constants import OUTPUT_DIR, DESIGN_FILE_NAME, VERSION
from dialogue_studio.models import Character, Choice, ContractViolation, Narration
from dialogue_studio.parser import parse_dialogue
from dialogue_studio.validator import check_document, validate_dialogue_text
from dialogue_studio.assembler import assemble, with_branch_targets
from dialogue_studio.exporter import export, export_design_file, export_design_files, layout_summary
from dialogue_studio.artifacts import (
    document_filename,
    load_documents,
    slug_from_path,
    write_artifact,
)


def _read_script(file_path: str) -> str:
    """Read a script file, exiting on missing or empty input."""
    if not os.path.exists(file_path):
        print(f"Error: File not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)

    try:
        with open(file_path, encoding="utf-8") as f:
            text = f.read()
    except UnicodeDecodeError as e:
        print(f"Error: File is not valid UTF-8: {file_path} ({e})", file=sys.stderr)
        raise SystemExit(1)

    if not text.strip():
        print(f"Error: File is empty: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    return text


def _load_or_exit(paths: list[str]):
    """Load document files, exiting when none are usable."""
    try:
        documents = load_documents(paths)
    except (json.JSONDecodeError, UnicodeDecodeError, ContractViolation) as e:
        print(f"Error: Could not load document: {e}", file=sys.stderr)
        raise SystemExit(1)
    if not documents:
        print("Error: No documents to process.", file=sys.stderr)
        raise SystemExit(1)
    return documents


def cmd_convert(args):
    """Parse a script file into a dialogue document."""
    text = _read_script(args.file)

    # Diagnostics are advisory: report them, parse anyway
    for message in validate_dialogue_text(text):
        print(f"Warning: {message}", file=sys.stderr)

    nodes = parse_dialogue(text)
    if not nodes:
        print(f"Error: Could not parse any dialogue from: {args.file}", file=sys.stderr)
        raise SystemExit(1)

    document = assemble(nodes, args.scene, args.sequence, title=args.title or "")
    if args.auto_targets:
        document = with_branch_targets(document)

    for message in check_document(document):
        print(f"Warning: {message}", file=sys.stderr)

    if args.output:
        output_dir, filename = os.path.split(args.output)
        path = write_artifact(output_dir or ".", filename, document.to_dict())
    else:
        path = write_artifact(os.path.join(OUTPUT_DIR, slug_from_path(args.file)),
                              document_filename(document), document.to_dict())

    narration_count = sum(1 for n in nodes if isinstance(n, Narration))
    character_count = sum(1 for n in nodes if isinstance(n, Character))
    choice_count = sum(1 for n in nodes if isinstance(n, Choice))
    print(f"Converted: {document.metadata.scene} / {document.metadata.sequence}: {document.metadata.title}")
    print(f"Parsed {len(nodes)} dialogues ({narration_count} narration, "
          f"{character_count} character, {choice_count} choice)")
    print(f"Written to {path}")


def cmd_validate(args):
    """Print diagnostics for a script file."""
    text = _read_script(args.file)
    errors = validate_dialogue_text(text)
    if not errors:
        print(f"OK: {args.file}")
        return
    for message in errors:
        print(message)
    print(f"{len(errors)} problem(s) found in {args.file}", file=sys.stderr)
    raise SystemExit(1)


def cmd_layout(args):
    """Write the design-tool layout for one or more documents."""
    documents = _load_or_exit(args.documents)
    if args.per_document:
        output_dir = args.output or os.path.join(OUTPUT_DIR, "Dialogues")
        paths = export_design_files(documents, output_dir)
        print(f"Laid out {len(documents)} documents into {len(paths)} design files")
        print(f"Written to {output_dir}")
        return

    output = args.output or os.path.join(OUTPUT_DIR, f"{args.name}.json")
    path = export_design_file(documents, output, name=args.name)

    counts = layout_summary(documents)
    print(f"Laid out {len(documents)} documents "
          f"({counts.get('FRAME', 0)} frames, {counts.get('TEXT', 0)} text nodes)")
    print(f"Written to {path}")


def cmd_export(args):
    """Write the scene/sequence JSON tree for one or more documents."""
    documents = _load_or_exit(args.documents)
    output_dir = args.output or os.path.join(OUTPUT_DIR, "Dialogues")
    manifest_path = export(documents, output_dir)

    with open(manifest_path, encoding="utf-8") as f:
        manifest = json.load(f)
    stats = manifest["stats"]
    print(f"Exported {stats['dialogues']} dialogues in {stats['sequences']} sequences "
          f"across {stats['scenes']} scenes")
    print(f"Manifest: {manifest_path}")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="dialogue-studio",
        description="Dialogue Studio: turn screenplay text into dialogue JSON and design layouts",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log dropped lines and other details")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # convert
    convert_parser = subparsers.add_parser("convert", help="Parse a script file into a dialogue document")
    convert_parser.add_argument("file", help="Path to the script text file")
    convert_parser.add_argument("--scene", default="01", help="Scene number (padded to SCENE_NN)")
    convert_parser.add_argument("--sequence", default="01", help="Sequence id, kept verbatim (01, 06A, ...)")
    convert_parser.add_argument("--title", help="Dialogue title (default: 'Dialogue <scene>-<sequence>')")
    convert_parser.add_argument("--auto-targets", action="store_true",
                                help="Generate branch targets for choices that have none")
    convert_parser.add_argument("-o", "--output", help="Output document path")
    convert_parser.set_defaults(func=cmd_convert)

    # validate
    validate_parser = subparsers.add_parser("validate", help="Check a script file for problems")
    validate_parser.add_argument("file", help="Path to the script text file")
    validate_parser.set_defaults(func=cmd_validate)

    # layout
    layout_parser = subparsers.add_parser("layout", help="Build a design-tool layout from documents")
    layout_parser.add_argument("documents", nargs="+", help="Document JSON files, in layout order")
    layout_parser.add_argument("-o", "--output", help="Output design file path")
    layout_parser.add_argument("--name", default=DESIGN_FILE_NAME, help="Design file name")
    layout_parser.add_argument("--per-document", action="store_true",
                               help="Write one design file per scene/sequence; -o is then a directory")
    layout_parser.set_defaults(func=cmd_layout)

    # export
    export_parser = subparsers.add_parser("export", help="Export documents as a scene/sequence JSON tree")
    export_parser.add_argument("documents", nargs="+", help="Document JSON files")
    export_parser.add_argument("-o", "--output", help="Output directory")
    export_parser.set_defaults(func=cmd_export)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    args.func(args)
