import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path

from docflow.classification.format_family import GENERIC_MEDIA_TYPE
from docflow.config.settings import Settings
from docflow.database.connection import apply_schema, close_pool, init_pool
from docflow.extraction.models import SourceFile
from docflow.logging.logger import Log
from docflow.pipeline.exceptions import OpenInEditorError
from docflow.pipeline.models import PipelineRequest, RequestContext
from docflow.pipeline.processor import build_processor


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract, structure and store one document for the editor"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--path", type=Path, help="Local file to ingest")
    source.add_argument("--source-id", help="ID of a row in source_documents")
    parser.add_argument("--media-type", help="Override the media type guessed from --path")
    parser.add_argument("--workspace-id", help="Workspace the document belongs to")
    parser.add_argument("--user-id", help="User opening the document")
    parser.add_argument("--user-name", help="Display name recorded with the activity")
    parser.add_argument("--plan", default="", help="Subscription plan of the caller")
    parser.add_argument("--tag", action="append", default=[], help="Tag for the new document")
    parser.add_argument(
        "--init-schema", action="store_true", help="Create the pipeline tables before running"
    )
    return parser


def build_request(args: argparse.Namespace) -> PipelineRequest:
    context = RequestContext(
        workspace_id=args.workspace_id,
        user_id=args.user_id,
        user_name=args.user_name,
        plan=args.plan,
    )
    if args.source_id:
        return PipelineRequest(context=context, source_document_id=args.source_id, tags=args.tag)
    path: Path = args.path
    media_type = args.media_type or mimetypes.guess_type(path.name)[0] or GENERIC_MEDIA_TYPE
    source_file = SourceFile(data=path.read_bytes(), media_type=media_type, file_name=path.name)
    return PipelineRequest(context=context, source_file=source_file, tags=args.tag)


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """Run one pipeline and print the new document ID. Returns the exit code."""
    request = build_request(args)
    await init_pool(settings)
    processor = build_processor(settings)
    processor.initialize()
    try:
        if args.init_schema:
            await apply_schema()
        outcome = await processor.process(request, progress=Log.info)
    except OpenInEditorError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    finally:
        processor.shutdown()
        await close_pool()

    for warning in outcome.warnings:
        Log.warning(warning)
    print(outcome.new_document_id)
    return 0


def main(argv: list[str] | None = None) -> None:
    """Entry point: parse arguments -> configure logging -> run one document."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    sys.exit(asyncio.run(run(args, settings)))


if __name__ == "__main__":
    main()
