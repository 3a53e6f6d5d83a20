"""Image endpoint path parameters, parsing, generation, signing, normalizing and hashing."""