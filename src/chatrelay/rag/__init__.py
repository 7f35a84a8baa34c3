"""chatrelay RAG pipeline — context assembly, vendor client, intent detection."""
