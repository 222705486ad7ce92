ERRORS = {
  "E_LAYOUT_MISSING": "Extraction index missing",
  "E_INDEX_PARQUET": "Extraction index is not a readable parquet file",
  "E_FILE_MISSING": "Indexed output file missing",
  "E_LENGTH_MISMATCH": "Output file length does not match index",
  "E_HASH_MISMATCH": "Output file content hash does not match index",
  "E_MAGIC_MISSING": "Output file missing RIFX magic bytes",
}
