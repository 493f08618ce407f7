"""
Similarity primitives shared by the rankers.

Responsibilities:
- Tokenize text and compare token sets (Jaccard) and TF-IDF vectors.
- Extract nouns and adjectives and check WordNet synonyms.
- Compare numeric attributes (price, proof) and embedding vectors.
"""
