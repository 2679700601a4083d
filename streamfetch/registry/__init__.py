"""Routing of inputs to handlers by prefix, string and URL rules."""