# Index mappings for log documents

LOG_MAPPINGS = {
	"properties": {
		"Host": {"type": "keyword"},
		"@timestamp": {"type": "date_nanos"},
		"Message": {"type": "text"},
		"Data": {"type": "object", "dynamic": True},
		"Level": {"type": "keyword"},
	}
}

# Body sent with the create-index request
LOG_INDEX_BODY = {
	"settings": {"number_of_shards": 1},
	"mappings": LOG_MAPPINGS,
}


def log_index_template(pattern):
	"""Index template so rotated indices pick up the log mapping."""
	return {
		"index_patterns": [pattern],
		"template": {
			"settings": {"number_of_shards": 1},
			"mappings": LOG_MAPPINGS,
		},
	}
