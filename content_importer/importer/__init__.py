"""Import pipeline.

Public API:
- Importer: Facade configuring sources, the pipeline and the writer
- EntryPipeline: Collects, transforms and sorts entries
- Writer: Writes entries, refusing conflicting paths
- PathResolver, SkipPolicy, DirectoryManager: Pipeline building blocks
"""

from content_importer.importer.directories import DirectoryManager
from content_importer.importer.importer import ASSET_REFERENCE_TYPES, Importer
from content_importer.importer.paths import PathResolver
from content_importer.importer.pipeline import OUTPUT_FORMATS, EntryPipeline
from content_importer.importer.policy import SkipPolicy
from content_importer.importer.transform import ContentTransformer, HtmlTransformer
from content_importer.importer.writer import Writer, entry_to_front_matter

__all__ = [
    "ASSET_REFERENCE_TYPES",
    "OUTPUT_FORMATS",
    "ContentTransformer",
    "DirectoryManager",
    "EntryPipeline",
    "HtmlTransformer",
    "Importer",
    "PathResolver",
    "SkipPolicy",
    "Writer",
    "entry_to_front_matter",
]
