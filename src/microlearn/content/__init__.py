"""Content delivery: node reads, video links, next-content recommendation."""
