"""
Analytics Package
=================
Pure numeric steps of the insight pipeline. Nothing here touches storage.

Modules:
  factors     - journal entries -> aligned per-factor series
  correlation - pairwise Pearson correlations, filtered and ranked
  trends      - least-squares slope per factor
  symptoms    - body-map markers grouped by (region, symptom)
"""
