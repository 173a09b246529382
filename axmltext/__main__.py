import argparse
import sys
from typing import List, Optional

from loguru import logger
from lxml import etree

from . import __version__
from .decoder import XMLFile
from .errors import ResParserError

LOG_FORMAT = "{line: >4}:{level}:\t{message}"


def setup_logging(verbose: bool) -> None:
    logger.remove()  # All configured handlers are removed
    logger.enable("axmltext")
    logger.add(sys.stderr, format=LOG_FORMAT, level="DEBUG" if verbose else "WARNING")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="axmltext",
        description="Decode an Android binary XML file (e.g. AndroidManifest.xml) into XML text.",
    )
    parser.add_argument("file", help="binary XML file to decode")
    parser.add_argument("-o", "--output", help="write the XML to this file instead of stdout")
    parser.add_argument("-p", "--pretty", action="store_true", help="indent the output")
    parser.add_argument("-v", "--verbose", action="store_true", help="trace every chunk on stderr")
    parser.add_argument("--version", action="version", version="%(prog)s " + __version__)
    return parser.parse_args(argv)


def pretty_print(text: str) -> str:
    root = etree.fromstring(text.encode("utf-8"))
    body = etree.tostring(root, encoding="unicode", pretty_print=True)
    return text[: text.index("\n") + 1] + body


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        xml = XMLFile.from_path(args.file)
    except OSError as e:
        logger.error(f"Can not read {args.file}: {e}")
        return 1
    except ResParserError as e:
        logger.error(f"Can not decode {args.file}: {e}")
        return 2

    output = xml.text
    if args.pretty:
        try:
            output = pretty_print(output)
        except etree.XMLSyntaxError as e:
            logger.warning(f"Output is not well-formed, printing it unchanged: {e}")

    if args.output:
        with open(args.output, "w", encoding="utf-8") as fp:
            fp.write(output)
    else:
        print(output, flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
