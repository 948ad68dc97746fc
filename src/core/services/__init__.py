# Core services: orchestrate components around injected ports
