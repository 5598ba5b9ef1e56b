"""
Follow-up question feature package.

Recommends reflection questions from a curated bank by comparing a user's
recent journal entries to each question with TF-IDF and cosine similarity.
Submodules:
    - domain: dataclasses shared across the feature
    - pipeline: text normalization, vector space and ranking
    - repository: SQL and the injectable store interface
    - services: per-user generation and completion tracking
    - jobs: weekly batch runner
    - api: FastAPI routes
"""
