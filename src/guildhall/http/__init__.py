"""HTTP primitives — immutable requests, responses, headers, cookies."""
