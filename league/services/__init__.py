# league/services
# Pure scoring helpers (catalog, differential, handicap math, strokes, absence)
# plus the stateful match processor and match-day sequencer built on them.
