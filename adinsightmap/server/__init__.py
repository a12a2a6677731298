"""
HTTP and Socket.IO surface plus the services behind it: the language-model
client, the analysis workflow and on-demand insight enrichment.
"""
