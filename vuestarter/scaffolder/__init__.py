"""vuestarter scaffolder -- writes a filtered template tree to disk.

Quick usage::

    from vuestarter.scaffolder import ProjectGenerator
    from vuestarter.schema import load_meta

    meta = load_meta("starter/meta.yml")
    generator = ProjectGenerator(meta, "starter/template")
    result = await generator.generate("/tmp/my-app", answers)
"""

from vuestarter.scaffolder.generator import GenerationResult, ProjectGenerator
from vuestarter.scaffolder.templates import TemplateRenderer

__all__ = [
    "GenerationResult",
    "ProjectGenerator",
    "TemplateRenderer",
]
