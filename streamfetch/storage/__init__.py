"""Storage layers for downloaded data: memory, temporary file, bounded and adaptive."""