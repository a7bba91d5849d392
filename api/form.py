"""Static HTML form for entering a page to relay."""

INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Page Relay</title>
  <style>
    body { font-family: sans-serif; max-width: 40rem; margin: 4rem auto; padding: 0 1rem; }
    form { display: flex; gap: 0.5rem; }
    input[type=text] { flex: 1; padding: 0.5rem; font-size: 1rem; }
    button { padding: 0.5rem 1rem; font-size: 1rem; }
  </style>
</head>
<body>
  <h1>Page Relay</h1>
  <p>Fetch a page as a search engine crawler sees it.</p>
  <form id="relay-form">
    <input type="text" id="url" name="url" placeholder="https://example.com/article" autofocus required>
    <button type="submit">Go</button>
  </form>
  <script>
    document.getElementById("relay-form").addEventListener("submit", function (event) {
      event.preventDefault();
      var url = document.getElementById("url").value.trim();
      if (url) {
        window.location.href = "/pages/" + encodeURIComponent(url);
      }
    });
  </script>
</body>
</html>
"""
