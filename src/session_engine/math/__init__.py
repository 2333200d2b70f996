"""Pure calculations: zones, confidence aggregation, listening summaries."""
