"""Novel platform services: view accounting and scheduled chapter publication."""
