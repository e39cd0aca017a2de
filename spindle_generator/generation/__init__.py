"""
Generation module for Spindle Generator.

Plans artifacts from the entity index and drives the template and output
collaborators to render and persist them.
"""

from .artifacts import (
    DEFAULT_SEQUENCE,
    ArtifactKind,
    ArtifactPlan,
    GenerationOptions,
    build_namespace,
    build_path,
)
from .planners import EntityPlanner, query_file_name, swagger_heading
from .aggregates import AggregatePlanner
from .generator import ArtifactFailure, ArtifactGenerator, GenerationReport

__all__ = [
    'DEFAULT_SEQUENCE',
    'ArtifactKind',
    'ArtifactPlan',
    'GenerationOptions',
    'build_namespace',
    'build_path',
    'EntityPlanner',
    'query_file_name',
    'swagger_heading',
    'AggregatePlanner',
    'ArtifactFailure',
    'ArtifactGenerator',
    'GenerationReport',
]
