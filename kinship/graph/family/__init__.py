"""Family graph package."""
from kinship.graph.family.relationships import RelationshipOperations
from kinship.graph.family.queries import FamilyQueries
from kinship.graph.family.trees import TreeBuilder
from kinship.graph.family.graph import FamilyGraph

__all__ = ["RelationshipOperations", "FamilyQueries", "TreeBuilder", "FamilyGraph"]
