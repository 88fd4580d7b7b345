# License client
