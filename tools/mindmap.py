#!/usr/bin/env python3
"""Command line front end of the mind map editor"""

import argparse
import json
import os
import sys

from dotenv import load_dotenv

from medmap.client import DEFAULT_SERVER, MindMapClient
from medmap.editor import MindMapEditor
from medmap.helpers import ensure_directories_exist, load_file

ENV_PATH = "~/.config/medmap/.env"


def alert(message: str) -> None:
    print(f"[!] {message}", file=sys.stderr)


def parse_arguments():
    parser = argparse.ArgumentParser(description="Turn medical notes into an editable mind map")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("pdf", nargs="?", help="PDF with medical notes")
    source.add_argument("--load", help="Mind map JSON saved earlier with --save")

    parser.add_argument(
        "-s", "--server", default=os.getenv("MEDMAP_SERVER", DEFAULT_SERVER), help="API server URL"
    )
    parser.add_argument("--add", type=int, default=0, help="Number of new nodes to add")
    parser.add_argument("--delete", action="append", default=[], help="Node id to delete")
    parser.add_argument(
        "--connect", action="append", default=[], metavar="SRC:DST", help="Connect two nodes"
    )
    parser.add_argument(
        "--rename", action="append", default=[], metavar="ID=LABEL", help="Change a node's label"
    )
    parser.add_argument("--regenerate", action="append", default=[], help="Node id to regenerate")
    parser.add_argument("--verify", action="store_true", help="Verify medical accuracy of all nodes")
    parser.add_argument("--save", help="Write the mind map as JSON")
    parser.add_argument("--jpeg", help="Export the canvas as JPEG")
    parser.add_argument("--pdf-out", help="Export the canvas as PDF")

    return parser.parse_args()


def main():
    args = parse_arguments()
    load_dotenv(os.path.expanduser(ENV_PATH))

    client = MindMapClient(args.server)
    if args.load:
        data = json.loads(load_file(os.path.expanduser(args.load)))
    else:
        data = client.process_pdf(args.pdf)
    editor = MindMapEditor.from_dict(data, client=client, alert=alert)

    for _ in range(args.add):
        editor.add_node()
    for node_id in args.delete:
        editor.select(node_id)
        editor.delete_selected()
    for pair in args.connect:
        source, target = pair.split(":", 1)
        editor.connect(source, target)
    for rename in args.rename:
        node_id, label = rename.split("=", 1)
        edit = editor.begin_edit(node_id)
        edit.draft = label
        edit.blur()
    for node_id in args.regenerate:
        editor.regenerate(node_id)
    if args.verify:
        editor.verify_all()

    if args.save:
        ensure_directories_exist(args.save)
        with open(args.save, "w", encoding="utf-8") as fp:
            json.dump(editor.to_dict(), fp, indent=2)
    if args.jpeg:
        editor.export_jpeg(args.jpeg)
    if args.pdf_out:
        editor.export_pdf(args.pdf_out)

    if not (args.save or args.jpeg or args.pdf_out):
        print(json.dumps(editor.to_dict(), indent=2))


if __name__ == "__main__":
    main()
