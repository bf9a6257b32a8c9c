"""Domain packages - one per resource (schemas, repository, service, router)"""
