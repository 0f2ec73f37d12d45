"""Stagebot: deploys pull requests and mapped branches to SST stages from GitHub webhooks."""
