"""
Conference Match & Network Graph Engine

This package matches conference attendees on their structured leadership
questionnaires and turns the resulting matches into a clustered network graph.

Key Design Decisions:
- Commonalities are extracted field-by-field from typed questionnaire records
- A single affinity score with diminishing returns summarizes a pair
- Matches are classified as high-affinity or strategic; weak pairs are dropped
- Engine functions are pure; persistence sits behind a repository interface
- The network graph is rebuilt from a snapshot on every request
"""

__version__ = "1.0.0"
