import argparse
import json
import logging
import sys

from config import config
from schema_intel.errors import SchemaIntelError
from schema_intel.pipeline import SchemaPipeline

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("schema_intel")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate Schema.org JSON-LD for a saved web page.")
    parser.add_argument("page", help="Path to a saved HTML snapshot")
    parser.add_argument("--url", required=True, help="URL the page was fetched from")
    parser.add_argument("--recommend", action="store_true", help="Also print schema type recommendations")
    parser.add_argument("--graph", action="store_true", help="Also print the entity knowledge graph as JSON-LD")
    parser.add_argument("--allow-thin", action="store_true", help="Generate a schema even for low-content pages")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point for the schema generator."""
    args = parse_args(argv)
    logger.info(f"Configuration: {config.to_dict()}")

    with open(args.page, encoding="utf-8") as f:
        html = f.read()

    pipeline = SchemaPipeline()
    try:
        result = pipeline.run(html, args.url, allow_thin_content=args.allow_thin)
    except SchemaIntelError as e:
        logger.error(f"✗ Failed to generate schema for {args.url}: {str(e)}")
        return 1

    output = {"schema": result.schema_document}
    if args.recommend:
        output["recommendations"] = [r.model_dump() for r in result.recommendations]
    if args.graph:
        output["graph"] = pipeline.graph_builder.export_to_schema(result.graph)

    json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    logger.info(f"✓ Generated {result.schema_document.get('@type')} schema")
    return 0


if __name__ == "__main__":
    sys.exit(main())
